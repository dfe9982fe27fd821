"""Install and uninstall skill packages into provider directories."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from skillsync.errors import (
    DirectoryCreationFailed,
    FileWriteFailed,
    InvalidRepositoryURL,
    RemoteAPIError,
    UninstallFailed,
)
from skillsync.fs import FileSystem, LocalFileSystem, PathLike
from skillsync.remote.cache import CloneCacheManager
from skillsync.remote.github import GitHubClient
from skillsync.skills.models import (
    LocalDirectoryOrigin,
    LocalOrigin,
    RemoteOrigin,
    SkillPackage,
)
from skillsync.skills.providers import ProviderPathResolver
from skillsync.skills.references import parse_github_url
from skillsync.skills.scanner import MARKER_FILENAME, SKILL_FILENAME, safe_is_dir
from skillsync.skills.strategies import Strategy, first_available
from skillsync.utils import get_logger, join_relative

logger = get_logger(__name__)

# Written by the installer itself, never copied from the origin
PACKAGE_ROOT_FILES = frozenset({SKILL_FILENAME, MARKER_FILENAME})

# Relative path -> local file to copy, or downloaded bytes
AuxiliaryFiles = dict[str, Path | bytes]


def collect_local_files(fs: FileSystem, package_dir: PathLike) -> AuxiliaryFiles | None:
    """Every file below ``package_dir`` except the package root files.

    Returns None when ``package_dir`` is not a directory.
    """
    package_dir = Path(package_dir)
    if not fs.is_dir(package_dir):
        return None

    files: AuxiliaryFiles = {}

    def walk(directory: Path, relative: str) -> None:
        try:
            names = fs.list_dir(directory)
        except OSError as e:
            logger.warning("Cannot list directory", extra={"path": str(directory), "error": str(e)})
            return
        for name in names:
            if not relative and name in PACKAGE_ROOT_FILES:
                continue
            path = directory / name
            child_relative = join_relative(relative, name)
            if safe_is_dir(fs, path):
                walk(path, child_relative)
            else:
                files[child_relative] = path

    walk(package_dir, "")
    return files


class SkillInstaller:
    """Writes skill packages into provider directories.

    Each installed package directory holds the verbatim ``SKILL.md``, a
    ``.skill-id`` marker with the skill's ``display_id``, and the other
    files of the package (references, scripts, assets) copied from the
    origin.

    Args:
        resolver: Provider directory lookup
        fs: File system to write to
        cache: Clone cache, preferred source for remote auxiliary files
        github: Contents API client, fallback for remote auxiliary files
    """

    def __init__(
        self,
        resolver: ProviderPathResolver,
        fs: FileSystem | None = None,
        cache: CloneCacheManager | None = None,
        github: GitHubClient | None = None,
    ) -> None:
        self.resolver = resolver
        self.fs = fs or LocalFileSystem()
        self.cache = cache
        self.github = github

    def target_dir(self, skill: SkillPackage, provider: str) -> Path:
        return self.resolver.skills_path(provider) / skill.local_id

    # ── auxiliary file discovery ─────────────────────────────────────────────

    async def _from_clone(self, origin: RemoteOrigin, skill: SkillPackage) -> AuxiliaryFiles | None:
        if self.cache is None:
            return None
        try:
            clone_dir = self.cache.cache_dir_for(origin.repo_url)
        except InvalidRepositoryURL:
            return None
        if not self.fs.is_dir(clone_dir):
            return None

        if skill.origin_sub_path:
            candidates = [join_relative(skill.origin_sub_path, skill.local_id)]
        else:
            candidates = [skill.local_id, join_relative("skills", skill.local_id)]
        for candidate in candidates:
            files = collect_local_files(self.fs, clone_dir / PurePosixPath(candidate))
            if files is not None:
                return files
        return None

    async def _from_api(self, origin: RemoteOrigin, remote_path: str) -> AuxiliaryFiles | None:
        if self.github is None:
            return None
        try:
            owner, repo = parse_github_url(origin.repo_url)
            tree = await self.github.download_tree(owner, repo, remote_path)
        except (RemoteAPIError, InvalidRepositoryURL) as e:
            logger.debug("Remote lookup failed", extra={"path": remote_path, "error": str(e)})
            return None
        if not tree:
            return None
        return {rel: data for rel, data in tree.items() if rel not in PACKAGE_ROOT_FILES}

    async def _remote_files(self, origin: RemoteOrigin, skill: SkillPackage) -> AuxiliaryFiles | None:
        api_paths = [skill.local_id, join_relative("skills", skill.local_id)]
        if skill.origin_sub_path:
            api_paths.insert(0, join_relative(skill.origin_sub_path, skill.local_id))

        strategies = [Strategy("clone cache", lambda: self._from_clone(origin, skill))]
        for remote_path in api_paths:
            strategies.append(Strategy(f"api:{remote_path}", lambda p=remote_path: self._from_api(origin, p)))
        return await first_available(strategies)

    async def auxiliary_files(self, skill: SkillPackage) -> AuxiliaryFiles:
        """Locate the non-root files of a package at its origin."""
        origin = skill.origin
        files: AuxiliaryFiles | None
        if isinstance(origin, RemoteOrigin):
            files = await self._remote_files(origin, skill)
        elif isinstance(origin, LocalOrigin):
            try:
                files = collect_local_files(self.fs, self.target_dir(skill, origin.provider))
            except ValueError:
                files = None
        elif isinstance(origin, LocalDirectoryOrigin):
            package_dir = Path(origin.path) / PurePosixPath(join_relative(skill.origin_sub_path, skill.local_id))
            files = collect_local_files(self.fs, package_dir)
        else:
            files = None

        if files is None:
            logger.warning(
                "Package files not found at origin, installing SKILL.md only",
                extra={"skill": skill.display_id, "origin": origin.display_name},
            )
            return {}
        return files

    # ── writes ───────────────────────────────────────────────────────────────

    def _make_dirs(self, path: Path, skill: SkillPackage) -> None:
        try:
            self.fs.make_dirs(path)
        except OSError as e:
            logger.error("Directory creation failed", extra={"path": str(path), "error": str(e)})
            raise DirectoryCreationFailed(str(path), skill) from e

    def _write(self, path: Path, data: bytes | Path, skill: SkillPackage) -> None:
        try:
            if isinstance(data, Path):
                self.fs.copy_file(data, path)
            else:
                self.fs.write_bytes(path, data)
        except OSError as e:
            logger.error("File write failed", extra={"path": str(path), "error": str(e)})
            raise FileWriteFailed(str(path), skill) from e

    def _install_one(self, skill: SkillPackage, target: Path, files: AuxiliaryFiles) -> None:
        self._make_dirs(target, skill)
        self._write(target / SKILL_FILENAME, skill.content.encode("utf-8"), skill)
        self._write(target / MARKER_FILENAME, skill.display_id.encode("utf-8"), skill)

        for relative, data in sorted(files.items()):
            destination = target / PurePosixPath(relative)
            if destination.parent != target:
                self._make_dirs(destination.parent, skill)
            self._write(destination, data, skill)

    async def install(self, skill: SkillPackage, providers: Iterable[str]) -> SkillPackage:
        """Install ``skill`` for each provider it is not yet installed for.

        Returns:
            The skill with the newly installed providers recorded

        Raises:
            UnknownProviderError: A provider is not configured; nothing is written
            DirectoryCreationFailed: A package directory could not be created
            FileWriteFailed: A package file could not be written

        Providers installed before a failure stay installed; the raised
        error's ``skill`` attribute records them.
        """
        pending = sorted(p for p in set(providers) if not skill.is_installed_for(p))
        targets = {p: self.target_dir(skill, p) for p in pending}
        if not targets:
            return skill

        files = await self.auxiliary_files(skill)
        updated = skill
        for provider, target in targets.items():
            self._install_one(updated, target, files)
            updated = updated.installing(provider)
            logger.info(
                "Installed skill",
                extra={"skill": skill.display_id, "provider": provider, "path": str(target), "files": len(files) + 2},
            )
        return updated

    async def uninstall(self, skill: SkillPackage, provider: str) -> SkillPackage:
        """Remove ``skill`` from a provider directory.

        Removing a package that is not on disk is not an error.

        Raises:
            UnknownProviderError: The provider is not configured
            UninstallFailed: The package directory could not be removed
        """
        target = self.target_dir(skill, provider)
        if self.fs.exists(target):
            try:
                self.fs.remove_tree(target)
            except OSError as e:
                logger.error("Uninstall failed", extra={"path": str(target), "error": str(e)})
                raise UninstallFailed(str(target), skill) from e
            logger.info("Uninstalled skill", extra={"skill": skill.display_id, "provider": provider})
        return skill.uninstalling(provider)
