"""Skills below an arbitrary local directory."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from skillsync.fs import FileSystem, LocalFileSystem
from skillsync.skills.merge import disambiguate, sort_by_name
from skillsync.skills.models import LocalDirectoryOrigin, SkillPackage
from skillsync.skills.scanner import DEFAULT_HIDDEN_ALLOWLIST, DEFAULT_MAX_DEPTH, scan_packages
from skillsync.skills.strategies import Strategy, first_available
from skillsync.sources.base import SkillSource, build_packages
from skillsync.sources.cloned import lookup_package, match_scanned
from skillsync.utils import get_logger, strip_file_scheme

logger = get_logger(__name__)


class LocalDirectorySource(SkillSource):
    """Lists skills found anywhere below ``path``.

    Hidden directories are skipped except for the provider directories in
    ``hidden_allowlist``, so a project checkout exposes the skills kept in
    its ``.claude`` or ``.codex`` folders.

    Args:
        path: Directory or ``file://`` URL
        fs: File system to read from
        hidden_allowlist: Dot-prefixed directory names that are still scanned
        max_depth: Scan depth limit
    """

    def __init__(
        self,
        path: str | Path,
        fs: FileSystem | None = None,
        hidden_allowlist: Iterable[str] = DEFAULT_HIDDEN_ALLOWLIST,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.path = strip_file_scheme(str(path))
        self.fs = fs or LocalFileSystem()
        self.hidden_allowlist = tuple(hidden_allowlist)
        self.max_depth = max_depth
        self.name = self.origin.display_name

    @property
    def origin(self) -> LocalDirectoryOrigin:
        return LocalDirectoryOrigin(path=self.path)

    def _scan(self) -> list[SkillPackage]:
        scanned = scan_packages(
            self.fs,
            self.path,
            skip_hidden=True,
            hidden_allowlist=self.hidden_allowlist,
            max_depth=self.max_depth,
        )
        return disambiguate(build_packages(self.fs, scanned, self.origin))

    async def fetch_all(self) -> list[SkillPackage]:
        if not self.fs.is_dir(self.path):
            logger.warning("Skill directory does not exist", extra={"path": self.path})
            return []
        return sort_by_name(self._scan())

    async def fetch_one(self, skill_id: str) -> SkillPackage | None:
        root = Path(self.path)

        async def at_root() -> SkillPackage | None:
            return lookup_package(self.fs, root, skill_id, self.origin)

        async def full_scan() -> SkillPackage | None:
            return match_scanned(self._scan(), skill_id)

        return await first_available([
            Strategy("root", at_root),
            Strategy("full scan", full_scan),
        ])
