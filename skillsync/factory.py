"""Factory functions for wiring skillsync components from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from skillsync.fs import FileSystem, LocalFileSystem

if TYPE_CHECKING:
    from skillsync.config import Config
    from skillsync.remote.cache import CloneCacheManager
    from skillsync.remote.github import GitHubClient
    from skillsync.skills.library import SkillLibrary
    from skillsync.skills.models import RemoteRepositoryReference
    from skillsync.sources.base import SkillSource


def create_github_client(config: "Config") -> "GitHubClient":
    from skillsync.remote.github import GitHubClient
    return GitHubClient(
        api_url=config.github.api_url,
        raw_url=config.github.raw_url,
        token=config.github.token or None,
        branches=config.github.branches,
        timeout_seconds=config.github.timeout_seconds,
    )


def create_cache(config: "Config", fs: FileSystem | None = None) -> "CloneCacheManager":
    """Create the clone cache with a git client from configuration."""
    from skillsync.remote.cache import CloneCacheManager
    from skillsync.remote.git import GitClient

    fs = fs or LocalFileSystem()
    git = GitClient(
        executable=config.git.executable,
        fs=fs,
        timeout_seconds=config.git.timeout_seconds,
    )
    return CloneCacheManager(config.cache.directory, git=git, fs=fs)


def create_remote_source(
    config: "Config",
    reference: "RemoteRepositoryReference",
    cache: "CloneCacheManager",
    fs: FileSystem | None = None,
    github: "GitHubClient | None" = None,
) -> "SkillSource":
    """Clone-backed source, or a contents-API source when ``github.use_clone`` is off."""
    if not config.github.use_clone:
        from skillsync.sources.github import GitHubApiSource
        return GitHubApiSource(reference.url, client=github or create_github_client(config))

    from skillsync.sources.cloned import ClonedRepoSource
    return ClonedRepoSource(reference.url, cache, fs=fs, max_depth=config.scan.max_depth)


def create_directory_source(config: "Config", path: str, fs: FileSystem | None = None) -> "SkillSource":
    from skillsync.sources.directory import LocalDirectorySource
    return LocalDirectorySource(
        path,
        fs=fs,
        hidden_allowlist=config.scan.hidden_allowlist,
        max_depth=config.scan.max_depth,
    )


def create_library(config: "Config", fs: FileSystem | None = None) -> "SkillLibrary":
    """Create a fully wired skill library.

    Args:
        config: skillsync configuration
        fs: File system override, the real one by default

    Returns:
        SkillLibrary with one local source per configured provider and a
        clone-backed source per stored repository
    """
    from skillsync.skills.installer import SkillInstaller
    from skillsync.skills.library import SkillLibrary
    from skillsync.skills.providers import ProviderPathResolver
    from skillsync.skills.references import RepositoryStore
    from skillsync.sources.local import LocalProviderSource

    fs = fs or LocalFileSystem()
    resolver = ProviderPathResolver.from_config(config)
    cache = create_cache(config, fs)
    github = create_github_client(config)

    local_sources = [
        LocalProviderSource(name, resolver.skills_path(name), fs=fs)
        for name in resolver.providers
    ]

    return SkillLibrary(
        local_sources=local_sources,
        installer=SkillInstaller(resolver, fs=fs, cache=cache, github=github),
        store=RepositoryStore(config.storage.repositories_file, fs=fs),
        cache=cache,
        remote_source_factory=lambda ref: create_remote_source(config, ref, cache, fs, github),
        directory_source_factory=lambda path: create_directory_source(config, path, fs),
        fs=fs,
    )
