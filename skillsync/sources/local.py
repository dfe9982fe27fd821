"""Skills installed in a provider's directory."""

from __future__ import annotations

from pathlib import Path

from skillsync.fs import FileSystem, LocalFileSystem, PathLike
from skillsync.skills.merge import sort_by_name
from skillsync.skills.models import LocalOrigin, ScannedPackage, SkillPackage
from skillsync.skills.scanner import MARKER_FILENAME, read_skill_file, scan_packages
from skillsync.skills.strategies import Strategy, first_available
from skillsync.sources.base import SkillSource, build_package
from skillsync.utils import get_logger

logger = get_logger(__name__)


def read_marker(fs: FileSystem, package_dir: PathLike) -> str | None:
    """Identity recorded in a package's ``.skill-id`` file, if any."""
    try:
        marker = fs.read_text(Path(package_dir) / MARKER_FILENAME).strip()
    except (OSError, UnicodeDecodeError):
        return None
    return marker or None


def identity_from_marker(marker: str | None, folder_name: str) -> tuple[str | None, str | None]:
    """Split a marker into ``(origin_sub_path, unique_key)``.

    Examples:
        (".claude/skills/ui-ux-pro-max", "ui-ux-pro-max") -> (".claude/skills", None)
        ("ui-ux-pro-max", "ui-ux-pro-max")                -> (None, None)
        ("tools/pdf-2", "pdf")                            -> (None, "tools/pdf-2")
    """
    if not marker or marker == folder_name:
        return None, None
    suffix = f"/{folder_name}"
    if marker.endswith(suffix) and len(marker) > len(suffix):
        return marker[: -len(suffix)], None
    return None, marker


class LocalProviderSource(SkillSource):
    """Lists the skills installed for one provider.

    A ``.skill-id`` marker written at install time restores the identity the
    skill had in its origin, so a skill installed from a nested repository
    path still matches its remote listing.
    """

    def __init__(self, provider: str, skills_root: PathLike, fs: FileSystem | None = None) -> None:
        self.provider = provider
        self.skills_root = Path(skills_root)
        self.fs = fs or LocalFileSystem()
        self.name = provider

    def _build(self, scanned: ScannedPackage) -> SkillPackage | None:
        origin = LocalOrigin(provider=self.provider)
        sub_path, unique_key = identity_from_marker(read_marker(self.fs, scanned.path), scanned.folder_name)
        skill = build_package(self.fs, scanned, origin, sub_path)
        if skill is None:
            return None
        return skill.model_copy(update={
            "unique_key": unique_key,
            "installed_providers": frozenset({self.provider}),
        })

    async def fetch_all(self) -> list[SkillPackage]:
        if not self.fs.is_dir(self.skills_root):
            logger.debug("Provider directory missing", extra={"provider": self.provider, "path": str(self.skills_root)})
            return []

        skills = []
        for scanned in scan_packages(self.fs, self.skills_root):
            skill = self._build(scanned)
            if skill is not None:
                skills.append(skill)
        return sort_by_name(skills)

    async def _direct(self, skill_id: str) -> SkillPackage | None:
        package_dir = self.skills_root / skill_id
        content = read_skill_file(self.fs, package_dir)
        if content is None:
            return None
        return self._build(ScannedPackage(Path(skill_id).name, "", content, str(package_dir)))

    async def _scan(self, skill_id: str) -> SkillPackage | None:
        skills = await self.fetch_all()
        return next((s for s in skills if s.display_id == skill_id), None)

    async def fetch_one(self, skill_id: str) -> SkillPackage | None:
        return await first_available([
            Strategy("direct", lambda: self._direct(skill_id)),
            Strategy("scan", lambda: self._scan(skill_id)),
        ])
