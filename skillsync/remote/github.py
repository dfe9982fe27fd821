"""GitHub contents API and raw file client."""

from __future__ import annotations

from typing import Literal

import httpx
from pydantic import BaseModel, ValidationError

from skillsync.errors import RateLimitedError, RemoteAPIError, RemoteFileNotFound
from skillsync.utils import get_logger, join_relative

logger = get_logger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_RAW_URL = "https://raw.githubusercontent.com"
DEFAULT_BRANCHES = ("main", "master")


class RemoteEntry(BaseModel):
    """One item of a contents API directory listing."""
    name: str
    type: Literal["file", "dir", "symlink", "submodule"]
    path: str
    download_url: str | None = None

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"

    @property
    def is_file(self) -> bool:
        return self.type == "file"


class GitHubClient:
    """Read-only access to public GitHub repositories.

    Directory listings go through the contents API; file bodies are fetched
    from the raw content host, trying each configured branch in turn.

    Args:
        api_url: Contents API base URL
        raw_url: Raw content base URL
        token: Optional token sent as a bearer token to the API
        branches: Branch names tried, in order, for raw file reads
        timeout_seconds: Request timeout
        transport: Custom httpx transport (``httpx.MockTransport`` in tests)
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        raw_url: str = DEFAULT_RAW_URL,
        token: str | None = None,
        branches: tuple[str, ...] | list[str] = DEFAULT_BRANCHES,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.raw_url = raw_url.rstrip("/")
        self.token = token
        self.branches = tuple(branches) or DEFAULT_BRANCHES
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def _api_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_seconds,
            follow_redirects=True,
            transport=self._transport,
        )

    async def _list(self, client: httpx.AsyncClient, owner: str, repo: str, path: str) -> list[RemoteEntry]:
        url = f"{self.api_url}/repos/{owner}/{repo}/contents/{path.strip('/')}"
        try:
            resp = await client.get(url, headers=self._api_headers)
        except httpx.HTTPError as e:
            raise RemoteAPIError(f"Request to {url} failed: {e}") from e

        if resp.status_code == 404:
            logger.debug("Remote path not found", extra={"url": url})
            return []
        if resp.status_code == 403:
            raise RateLimitedError(f"GitHub API rate limit hit for {owner}/{repo}")
        if resp.status_code != 200:
            raise RemoteAPIError(f"GitHub API returned {resp.status_code} for {url}")

        try:
            data = resp.json()
        except ValueError as e:
            raise RemoteAPIError(f"Invalid JSON from {url}") from e

        # Directories come back as a list, single files as one object
        items = data if isinstance(data, list) else [data]
        entries: list[RemoteEntry] = []
        for item in items:
            try:
                entries.append(RemoteEntry.model_validate(item))
            except ValidationError:
                logger.debug("Skipping unrecognized contents entry", extra={"url": url})
        return entries

    async def list_directory(self, owner: str, repo: str, path: str = "") -> list[RemoteEntry]:
        """List a repository directory.

        Returns:
            Entries of the directory; empty when the path does not exist.

        Raises:
            RateLimitedError: The API answered 403
            RemoteAPIError: Network failure or unexpected response
        """
        async with self._client() as client:
            return await self._list(client, owner, repo, path)

    async def _read_raw(self, client: httpx.AsyncClient, owner: str, repo: str, path: str) -> bytes:
        for branch in self.branches:
            url = f"{self.raw_url}/{owner}/{repo}/{branch}/{path.strip('/')}"
            try:
                resp = await client.get(url)
            except httpx.HTTPError as e:
                raise RemoteAPIError(f"Request to {url} failed: {e}") from e
            if resp.status_code == 404:
                continue
            if resp.status_code != 200:
                raise RemoteAPIError(f"Raw content host returned {resp.status_code} for {url}")
            return resp.content
        raise RemoteFileNotFound(path)

    async def read_bytes(self, owner: str, repo: str, path: str) -> bytes:
        """Fetch a file body, trying each branch in order.

        Raises:
            RemoteFileNotFound: Every branch answered 404
            RemoteAPIError: Network failure or unexpected response
        """
        async with self._client() as client:
            return await self._read_raw(client, owner, repo, path)

    async def read_file(self, owner: str, repo: str, path: str) -> str:
        """Fetch a UTF-8 text file. See ``read_bytes``."""
        data = await self.read_bytes(owner, repo, path)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RemoteAPIError(f"{path} is not valid UTF-8") from e

    async def download_tree(self, owner: str, repo: str, path: str) -> dict[str, bytes]:
        """Download every file below a repository directory.

        Returns:
            File bodies keyed by path relative to ``path``. Empty when the
            directory does not exist.
        """
        files: dict[str, bytes] = {}
        base = path.strip("/")

        async with self._client() as client:
            async def walk(current: str, relative: str) -> None:
                for entry in await self._list(client, owner, repo, current):
                    child_relative = join_relative(relative, entry.name)
                    if entry.is_dir:
                        await walk(entry.path, child_relative)
                    elif entry.is_file:
                        files[child_relative] = await self._read_raw(client, owner, repo, entry.path)

            await walk(base, "")

        logger.debug(
            "Downloaded remote tree",
            extra={"repo": f"{owner}/{repo}", "path": base, "files": len(files)},
        )
        return files
