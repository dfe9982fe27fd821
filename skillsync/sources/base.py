"""Base interface for skill sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from skillsync.errors import SkillParseError
from skillsync.fs import FileSystem
from skillsync.skills.models import Origin, ScannedPackage, SkillPackage
from skillsync.skills.parser import parse_skill
from skillsync.skills.scanner import count_auxiliary_files
from skillsync.utils import get_logger

logger = get_logger(__name__)


class SkillSource(ABC):
    """A place skills can be listed from.

    Sources never raise for an unavailable location: a missing directory,
    a failed clone or an unreachable API yields an empty listing. Packages
    whose SKILL.md does not parse are skipped.

    Example:
        >>> class StaticSource(SkillSource):
        ...     name = "static"
        ...
        ...     async def fetch_all(self) -> list[SkillPackage]:
        ...         return list(self.skills)
        ...
        ...     async def fetch_one(self, skill_id: str) -> SkillPackage | None:
        ...         return next((s for s in self.skills if s.display_id == skill_id), None)
    """

    name: str = "source"

    @abstractmethod
    async def fetch_all(self) -> list[SkillPackage]:
        """List every skill, sorted case-insensitively by name."""

    @abstractmethod
    async def fetch_one(self, skill_id: str) -> SkillPackage | None:
        """Look up one skill by folder name or display id; None if absent."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def build_package(
    fs: FileSystem,
    scanned: ScannedPackage,
    origin: Origin,
    origin_sub_path: str | None = None,
) -> SkillPackage | None:
    """Parse a scanned package; None when its SKILL.md is invalid."""
    try:
        skill = parse_skill(scanned.content, scanned.folder_name, origin, origin_sub_path)
    except SkillParseError as e:
        logger.debug("Skipping invalid skill package", extra={"path": scanned.path, "error": str(e)})
        return None

    references, scripts = count_auxiliary_files(fs, scanned.path)
    return skill.model_copy(update={"reference_count": references, "script_count": scripts})


def build_packages(
    fs: FileSystem,
    scanned: Iterable[ScannedPackage],
    origin: Origin,
) -> list[SkillPackage]:
    """Parse packages using their scan-relative parent path as ``origin_sub_path``."""
    skills = []
    for item in scanned:
        skill = build_package(fs, item, origin, item.parent_path or None)
        if skill is not None:
            skills.append(skill)
    return skills
