"""Local mirror of remote skill repositories.

Each repository gets one directory under the cache root, named
``{owner}_{repo}``. A sync pulls when the directory already holds a clone
and clones otherwise. Syncs of the same directory are serialized.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from skillsync.errors import CloneFailedError
from skillsync.fs import FileSystem, LocalFileSystem, PathLike
from skillsync.remote.git import GitClient
from skillsync.skills.references import parse_github_url
from skillsync.utils import get_logger

logger = get_logger(__name__)

DEFAULT_CACHE_DIR = Path("~/.skillsync/cache").expanduser()


class CloneCacheManager:
    """Keeps shallow clones of remote repositories up to date.

    Args:
        cache_root: Directory holding one clone per repository
        git: Git client used for clone/pull
        fs: File system used for cache housekeeping
    """

    def __init__(
        self,
        cache_root: PathLike = DEFAULT_CACHE_DIR,
        git: GitClient | None = None,
        fs: FileSystem | None = None,
    ) -> None:
        self.cache_root = Path(cache_root)
        self.fs = fs or LocalFileSystem()
        self.git = git or GitClient(fs=self.fs)
        self._locks: dict[Path, asyncio.Lock] = {}

    def cache_dir_for(self, url: str) -> Path:
        """Cache directory for a repository URL.

        Raises:
            InvalidRepositoryURL: The URL has no owner/repo part
        """
        owner, repo = parse_github_url(url)
        return self.cache_root / f"{owner}_{repo}"

    def _lock_for(self, directory: Path) -> asyncio.Lock:
        lock = self._locks.get(directory)
        if lock is None:
            lock = self._locks[directory] = asyncio.Lock()
        return lock

    def has_cache(self, url: str) -> bool:
        return self.git.is_repository(self.cache_dir_for(url))

    async def sync(self, url: str) -> Path:
        """Clone or fast-forward the mirror of ``url``.

        Returns:
            The cache directory

        Raises:
            CloneFailedError: First clone failed, or the cache directory could not be prepared
            PullFailedError: Updating an existing clone failed; the clone is kept
            GitNotInstalledError: git is not available
            InvalidRepositoryURL: The URL has no owner/repo part
        """
        directory = self.cache_dir_for(url)
        async with self._lock_for(directory):
            if self.git.is_repository(directory):
                logger.debug("Pulling cached clone", extra={"url": url, "cache_dir": str(directory)})
                await self.git.pull(directory)
                return directory

            try:
                if self.fs.exists(directory):
                    # Leftover from an interrupted clone; git refuses non-empty targets
                    logger.info("Removing incomplete clone", extra={"cache_dir": str(directory)})
                    self.fs.remove_tree(directory)
                self.fs.make_dirs(self.cache_root)
            except OSError as e:
                raise CloneFailedError(f"cannot prepare {directory}: {e}") from e

            logger.info("Cloning repository", extra={"url": url, "cache_dir": str(directory)})
            await self.git.clone(url, directory)
            return directory

    async def evict(self, url: str) -> bool:
        """Delete the mirror of ``url``.

        Returns:
            True if a directory was removed
        """
        directory = self.cache_dir_for(url)
        async with self._lock_for(directory):
            if not self.fs.exists(directory):
                return False
            self.fs.remove_tree(directory)
            logger.info("Evicted cached clone", extra={"url": url, "cache_dir": str(directory)})
            return True
