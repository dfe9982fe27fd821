"""Skills from a locally mirrored clone of a remote repository."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from skillsync.errors import GitError, InvalidRepositoryURL
from skillsync.fs import FileSystem, LocalFileSystem
from skillsync.remote.cache import CloneCacheManager
from skillsync.skills.merge import disambiguate, sort_by_name
from skillsync.skills.models import Origin, RemoteOrigin, ScannedPackage, SkillPackage
from skillsync.skills.scanner import DEFAULT_MAX_DEPTH, read_skill_file, scan_packages
from skillsync.skills.strategies import Strategy, first_available
from skillsync.sources.base import SkillSource, build_package, build_packages
from skillsync.utils import get_logger, join_relative

logger = get_logger(__name__)


def lookup_package(fs: FileSystem, root: Path, relative_id: str, origin: Origin) -> SkillPackage | None:
    """Parse the package at ``root/relative_id`` if it exists.

    The parent part of ``relative_id`` becomes the ``origin_sub_path``, so a
    direct lookup yields the same identity a full scan would.
    """
    relative = PurePosixPath(relative_id)
    package_dir = root / relative
    content = read_skill_file(fs, package_dir)
    if content is None:
        return None
    parent = "" if str(relative.parent) == "." else str(relative.parent)
    scanned = ScannedPackage(relative.name, parent, content, str(package_dir))
    return build_package(fs, scanned, origin, parent or None)


def match_scanned(skills: list[SkillPackage], skill_id: str) -> SkillPackage | None:
    """Find by display id first, then by folder name."""
    for skill in skills:
        if skill.display_id == skill_id:
            return skill
    for skill in skills:
        if skill.local_id == skill_id:
            return skill
    return None


class ClonedRepoSource(SkillSource):
    """Lists skills from the clone cache of a GitHub repository.

    Every listing syncs the clone first. When neither a clone nor a pull
    succeeds the source is treated as empty.
    """

    def __init__(
        self,
        repo_url: str,
        cache: CloneCacheManager,
        fs: FileSystem | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.repo_url = repo_url
        self.cache = cache
        self.fs = fs or LocalFileSystem()
        self.max_depth = max_depth
        self.name = RemoteOrigin(repo_url=repo_url).display_name

    @property
    def origin(self) -> RemoteOrigin:
        return RemoteOrigin(repo_url=self.repo_url)

    async def _sync(self) -> Path | None:
        try:
            return await self.cache.sync(self.repo_url)
        except (GitError, InvalidRepositoryURL) as e:
            logger.warning(
                "Repository unavailable",
                extra={"url": self.repo_url, "error": str(e)},
            )
            return None

    def _scan(self, root: Path) -> list[SkillPackage]:
        scanned = scan_packages(self.fs, root, max_depth=self.max_depth)
        return disambiguate(build_packages(self.fs, scanned, self.origin))

    async def fetch_all(self) -> list[SkillPackage]:
        root = await self._sync()
        if root is None:
            return []
        skills = self._scan(root)
        logger.debug("Listed cloned repository", extra={"url": self.repo_url, "count": len(skills)})
        return sort_by_name(skills)

    async def fetch_one(self, skill_id: str) -> SkillPackage | None:
        root = await self._sync()
        if root is None:
            return None

        async def at_root() -> SkillPackage | None:
            return lookup_package(self.fs, root, skill_id, self.origin)

        async def in_skills_dir() -> SkillPackage | None:
            return lookup_package(self.fs, root, join_relative("skills", skill_id), self.origin)

        async def full_scan() -> SkillPackage | None:
            return match_scanned(self._scan(root), skill_id)

        return await first_available([
            Strategy("root", at_root),
            Strategy("skills directory", in_skills_dir),
            Strategy("full scan", full_scan),
        ])
