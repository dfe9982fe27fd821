"""Directory scanner for skill packages.

A skill package is a directory containing ``SKILL.md``. Package directories
are leaves: the scanner never looks for packages nested inside another
package.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from skillsync.fs import FileSystem, PathLike
from skillsync.skills.models import ScannedPackage
from skillsync.utils import get_logger, join_relative

logger = get_logger(__name__)

SKILL_FILENAME = "SKILL.md"
MARKER_FILENAME = ".skill-id"
REFERENCES_DIR = "references"
SCRIPTS_DIR = "scripts"

DEFAULT_MAX_DEPTH = 5

# Hidden directories that commonly hold provider-specific skill trees
DEFAULT_HIDDEN_ALLOWLIST = (".claude", ".codex", ".agent", ".gemini")

ALWAYS_SKIPPED = frozenset({".git"})


def read_skill_file(fs: FileSystem, package_dir: PathLike) -> str | None:
    """Read ``SKILL.md`` from a package directory.

    Returns None when the file is missing, unreadable or not valid UTF-8.
    """
    try:
        return fs.read_text(Path(package_dir) / SKILL_FILENAME)
    except (OSError, UnicodeDecodeError):
        return None


def safe_is_dir(fs: FileSystem, path: Path) -> bool:
    """``fs.is_dir`` that reports an unreadable path as not a directory."""
    try:
        return fs.is_dir(path)
    except OSError as e:
        logger.debug("Cannot stat %s: %s", path, e)
        return False


def scan_packages(
    fs: FileSystem,
    root: PathLike,
    *,
    skip_hidden: bool = False,
    hidden_allowlist: Iterable[str] = (),
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[ScannedPackage]:
    """Find every package directory below ``root``.

    Args:
        fs: File system to read from
        root: Directory to scan, listed at depth 0
        skip_hidden: Skip dot-prefixed entries not in ``hidden_allowlist``
        hidden_allowlist: Dot-prefixed names still visited when skipping hidden
        max_depth: Each level below ``root`` adds one; a directory is listed
            only while its depth is below ``max_depth``

    Returns:
        Packages in depth-first listing order. ``parent_path`` is relative to
        ``root`` and empty for packages directly below it.
    """
    allowed = frozenset(hidden_allowlist)
    found: list[ScannedPackage] = []

    def visit(directory: Path, relative: str, depth: int) -> None:
        if depth >= max_depth:
            return
        try:
            entries = fs.list_dir(directory)
        except OSError as e:
            logger.debug("Cannot list %s: %s", directory, e)
            return

        for name in entries:
            if name in ALWAYS_SKIPPED:
                continue
            if skip_hidden and name.startswith(".") and name not in allowed:
                continue

            child = directory / name
            if not safe_is_dir(fs, child):
                continue

            content = read_skill_file(fs, child)
            if content is not None:
                found.append(ScannedPackage(
                    folder_name=name,
                    parent_path=relative,
                    content=content,
                    path=str(child),
                ))
            else:
                visit(child, join_relative(relative, name), depth + 1)

    visit(Path(root), "", 0)
    return found


def _count_files(fs: FileSystem, directory: Path) -> int:
    if not safe_is_dir(fs, directory):
        return 0
    try:
        names = fs.list_dir(directory)
    except OSError:
        return 0
    return sum(1 for name in names if not safe_is_dir(fs, directory / name))


def count_auxiliary_files(fs: FileSystem, package_dir: PathLike) -> tuple[int, int]:
    """Return ``(reference_count, script_count)`` for a package directory."""
    base = Path(package_dir)
    return _count_files(fs, base / REFERENCES_DIR), _count_files(fs, base / SCRIPTS_DIR)
