"""Remote repository access: git clones and the GitHub contents API."""

from skillsync.remote.cache import CloneCacheManager
from skillsync.remote.git import GitClient, clone_url
from skillsync.remote.github import GitHubClient, RemoteEntry

__all__ = [
    "CloneCacheManager",
    "GitClient",
    "GitHubClient",
    "RemoteEntry",
    "clone_url",
]
