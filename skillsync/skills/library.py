"""The skill library: every catalog plus install/uninstall bookkeeping."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Sequence

from skillsync.errors import InstallError, SkillSyncError
from skillsync.fs import FileSystem, LocalFileSystem
from skillsync.remote.cache import CloneCacheManager
from skillsync.skills.catalog import SkillCatalog
from skillsync.skills.installer import SkillInstaller
from skillsync.skills.models import LocalOrigin, RemoteRepositoryReference, SkillPackage
from skillsync.skills.references import LOCAL_CATALOG_ID, RepositoryStore
from skillsync.skills.writer import LocalSkillWriter
from skillsync.sources.base import SkillSource
from skillsync.sources.directory import LocalDirectorySource
from skillsync.sources.merged import MergedSource
from skillsync.utils import generate_uuid, get_logger, strip_file_scheme

logger = get_logger(__name__)

RemoteSourceFactory = Callable[[RemoteRepositoryReference], SkillSource]
DirectorySourceFactory = Callable[[str], SkillSource]


class SkillLibrary:
    """Coordinates the local catalog, the remote catalogs and the installer.

    The local catalog lists what is installed for every provider, merged by
    identity. Each remote catalog lists one repository; after a refresh its
    installation state mirrors the local catalog. Installs and uninstalls
    keep every catalog in step without a full refresh.

    Args:
        local_sources: One source per provider directory
        installer: Writes and removes packages
        store: Persisted list of remote repositories
        cache: Clone cache, evicted when a repository is removed
        remote_source_factory: Builds the source for a repository reference
        writer: Editor for local skills
        directory_source_factory: Builds the source for an ad-hoc directory
        fs: File system handed to ad-hoc directory sources
    """

    def __init__(
        self,
        local_sources: Sequence[SkillSource],
        installer: SkillInstaller,
        store: RepositoryStore,
        cache: CloneCacheManager,
        remote_source_factory: RemoteSourceFactory,
        writer: LocalSkillWriter | None = None,
        directory_source_factory: DirectorySourceFactory | None = None,
        fs: FileSystem | None = None,
    ) -> None:
        self.installer = installer
        self.store = store
        self.cache = cache
        self.remote_source_factory = remote_source_factory
        self.fs = fs or LocalFileSystem()
        self.writer = writer or LocalSkillWriter(installer.resolver, self.fs)
        self.directory_source_factory = directory_source_factory or (
            lambda path: LocalDirectorySource(path, fs=self.fs)
        )
        self.local = SkillCatalog(LOCAL_CATALOG_ID, "Local", MergedSource(local_sources))
        self._remote: dict[str, SkillCatalog] = {}
        self._directories: dict[str, SkillCatalog] = {}
        self._sync_remote_catalogs()

    # ── catalogs ─────────────────────────────────────────────────────────────

    def _catalog_for(self, reference: RemoteRepositoryReference) -> SkillCatalog:
        return SkillCatalog(
            reference.id,
            reference.name,
            self.remote_source_factory(reference),
            url=reference.url,
        )

    def _sync_remote_catalogs(self) -> None:
        """Match the remote catalogs to the stored references."""
        current: dict[str, SkillCatalog] = {}
        for reference in self.store.references:
            current[reference.id] = self._remote.get(reference.id) or self._catalog_for(reference)
        self._remote = current

    @property
    def remote_catalogs(self) -> list[SkillCatalog]:
        return list(self._remote.values())

    @property
    def catalogs(self) -> list[SkillCatalog]:
        return [self.local, *self._remote.values(), *self._directories.values()]

    def catalog(self, ref: str) -> SkillCatalog | None:
        """Find a catalog by id, URL or case-insensitive name."""
        for catalog in self.catalogs:
            if ref in (catalog.id, catalog.url):
                return catalog
        folded = ref.casefold()
        for catalog in self.catalogs:
            if catalog.name.casefold() == folded:
                return catalog
        return None

    # ── loading ──────────────────────────────────────────────────────────────

    async def refresh(self) -> dict[str, list[SkillPackage]]:
        """Reload every catalog concurrently.

        Returns:
            Skills per catalog id. A catalog whose source failed is empty
            and carries an ``error_message``.
        """
        self._sync_remote_catalogs()
        others = [c for c in self.catalogs if c is not self.local]
        await asyncio.gather(self.local.load(), *(c.load() for c in others))

        local_skills = self.local.skills
        for catalog in others:
            catalog.sync_installations(local_skills)

        logger.info(
            "Library refreshed",
            extra={"catalogs": len(self.catalogs), "local_skills": len(local_skills)},
        )
        return {catalog.id: catalog.skills for catalog in self.catalogs}

    async def load_catalog(self, catalog: SkillCatalog) -> list[SkillPackage]:
        """Load one catalog and reconcile it with the local installations."""
        if catalog is self.local:
            return await self.local.load()
        await asyncio.gather(self.local.load(), catalog.load())
        catalog.sync_installations(self.local.skills)
        return catalog.skills

    async def open_directory(self, path: str) -> SkillCatalog:
        """Open an ad-hoc catalog over a local directory and load it."""
        path = strip_file_scheme(path)
        catalog = self._directories.get(path)
        if catalog is None:
            source = self.directory_source_factory(path)
            catalog = SkillCatalog(generate_uuid(), source.name, source)
            self._directories[path] = catalog
        await self.load_catalog(catalog)
        return catalog

    # ── repositories ─────────────────────────────────────────────────────────

    def add_repository(self, url: str, name: str | None = None) -> SkillCatalog:
        """Register a repository and return its (not yet loaded) catalog.

        Raises:
            InvalidRepositoryURL: Not a GitHub repository URL
            DuplicateRepositoryError: Already registered
        """
        reference = self.store.add(url, name)
        catalog = self._catalog_for(reference)
        self._remote[reference.id] = catalog
        return catalog

    async def remove_repository(self, ref: str) -> RemoteRepositoryReference:
        """Unregister a repository by id or URL and drop its clone.

        Raises:
            RepositoryNotFound: No repository matches ``ref``
        """
        reference = self.store.remove(ref)
        self._remote.pop(reference.id, None)
        try:
            await self.cache.evict(reference.url)
        except (OSError, SkillSyncError) as e:
            logger.warning("Could not delete cached clone", extra={"url": reference.url, "error": str(e)})
        return reference

    # ── installation ─────────────────────────────────────────────────────────

    def _apply_installation(self, skill: SkillPackage) -> None:
        key = skill.display_id
        providers = skill.installed_providers
        for catalog in self.catalogs:
            catalog.set_installed(key, providers)

        if not providers:
            self.local.remove(key)
            return

        first = sorted(providers)[0]
        existing = self.local.get(key)
        if existing is None:
            self.local.add(skill.model_copy(update={"origin": LocalOrigin(provider=first)}))
        elif isinstance(existing.origin, LocalOrigin) and existing.origin.provider not in providers:
            # The copy the local record pointed at was removed
            self.local.replace(existing.model_copy(update={"origin": LocalOrigin(provider=first)}))

    async def install(self, skill: SkillPackage, providers: Iterable[str]) -> SkillPackage:
        """Install a skill and update every catalog listing it.

        On a partial failure the providers that did succeed are still
        recorded before the error is re-raised.
        """
        try:
            updated = await self.installer.install(skill, providers)
        except InstallError as e:
            if e.skill is not None:
                self._apply_installation(e.skill)
            raise
        self._apply_installation(updated)
        return updated

    async def uninstall(self, skill: SkillPackage, provider: str) -> SkillPackage:
        """Uninstall a skill for one provider and update every catalog."""
        updated = await self.installer.uninstall(skill, provider)
        self._apply_installation(updated)
        return updated

    def save_skill(self, skill: SkillPackage, content: str) -> SkillPackage:
        """Edit a local skill's SKILL.md and update the local catalog."""
        saved = self.writer.save(skill, content)
        self.local.replace(saved)
        return saved
