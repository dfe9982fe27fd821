"""Tests for the GitHub contents API client."""

from __future__ import annotations

import httpx
import pytest

from skillsync.errors import RateLimitedError, RemoteAPIError, RemoteFileNotFound
from skillsync.remote.github import GitHubClient

API = "https://api.github.com"
RAW = "https://raw.githubusercontent.com"


def entry(path: str, kind: str = "file") -> dict:
    return {"name": path.rsplit("/", 1)[-1], "type": kind, "path": path, "download_url": None}


class FakeGitHub:
    """Serves contents API listings and raw files from dictionaries."""

    def __init__(
        self,
        listings: dict[str, list[dict] | dict] | None = None,
        raw: dict[str, bytes] | None = None,
        status: int | None = None,
    ) -> None:
        self.listings = listings or {}
        self.raw = raw or {}
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status is not None:
            return httpx.Response(self.status)
        url = str(request.url)
        if url.startswith(API):
            path = url.split("/contents/", 1)[1].rstrip("/")
            if path in self.listings:
                return httpx.Response(200, json=self.listings[path])
            return httpx.Response(404, json={"message": "Not Found"})
        path = url[len(RAW) + 1:]
        if path in self.raw:
            return httpx.Response(200, content=self.raw[path])
        return httpx.Response(404)

    def client(self, **kwargs) -> GitHubClient:
        return GitHubClient(transport=httpx.MockTransport(self), **kwargs)


class TestListDirectory:
    @pytest.mark.asyncio
    async def test_lists_entries(self):
        fake = FakeGitHub(listings={"": [entry("skills", "dir"), entry("README.md")]})
        entries = await fake.client().list_directory("o", "r")

        assert [(e.name, e.is_dir) for e in entries] == [("skills", True), ("README.md", False)]
        assert str(fake.requests[0].url) == f"{API}/repos/o/r/contents/"

    @pytest.mark.asyncio
    async def test_not_found_is_empty(self):
        assert await FakeGitHub().client().list_directory("o", "r", "missing") == []

    @pytest.mark.asyncio
    async def test_single_object_is_wrapped(self):
        fake = FakeGitHub(listings={"README.md": entry("README.md")})
        entries = await fake.client().list_directory("o", "r", "README.md")
        assert len(entries) == 1 and entries[0].is_file

    @pytest.mark.asyncio
    async def test_unknown_entries_are_skipped(self):
        fake = FakeGitHub(listings={"": [entry("a", "dir"), {"name": "weird"}]})
        assert [e.name for e in await fake.client().list_directory("o", "r")] == ["a"]

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        with pytest.raises(RateLimitedError):
            await FakeGitHub(status=403).client().list_directory("o", "r")

    @pytest.mark.asyncio
    async def test_server_error(self):
        with pytest.raises(RemoteAPIError):
            await FakeGitHub(status=500).client().list_directory("o", "r")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = GitHubClient(transport=httpx.MockTransport(handler))
        with pytest.raises(RemoteAPIError):
            await client.list_directory("o", "r")

    @pytest.mark.asyncio
    async def test_token_sent_as_bearer(self):
        fake = FakeGitHub(listings={"": []})
        await fake.client(token="secret").list_directory("o", "r")
        assert fake.requests[0].headers["Authorization"] == "Bearer secret"


class TestReadFile:
    @pytest.mark.asyncio
    async def test_reads_main_branch(self):
        fake = FakeGitHub(raw={"o/r/main/skills/pdf/SKILL.md": b"content"})
        assert await fake.client().read_file("o", "r", "skills/pdf/SKILL.md") == "content"

    @pytest.mark.asyncio
    async def test_falls_back_to_master(self):
        fake = FakeGitHub(raw={"o/r/master/SKILL.md": b"legacy"})
        assert await fake.client().read_file("o", "r", "SKILL.md") == "legacy"
        assert [r.url.path for r in fake.requests] == ["/o/r/main/SKILL.md", "/o/r/master/SKILL.md"]

    @pytest.mark.asyncio
    async def test_missing_on_every_branch(self):
        with pytest.raises(RemoteFileNotFound):
            await FakeGitHub().client().read_file("o", "r", "SKILL.md")

    @pytest.mark.asyncio
    async def test_invalid_utf8(self):
        fake = FakeGitHub(raw={"o/r/main/SKILL.md": b"\xff\xfe"})
        with pytest.raises(RemoteAPIError):
            await fake.client().read_file("o", "r", "SKILL.md")


class TestDownloadTree:
    @pytest.mark.asyncio
    async def test_recurses_into_directories(self):
        fake = FakeGitHub(
            listings={
                "skills/pdf": [
                    entry("skills/pdf/SKILL.md"),
                    entry("skills/pdf/references", "dir"),
                ],
                "skills/pdf/references": [entry("skills/pdf/references/forms.md")],
            },
            raw={
                "o/r/main/skills/pdf/SKILL.md": b"skill",
                "o/r/main/skills/pdf/references/forms.md": b"forms",
            },
        )
        tree = await fake.client().download_tree("o", "r", "skills/pdf")
        assert tree == {"SKILL.md": b"skill", "references/forms.md": b"forms"}

    @pytest.mark.asyncio
    async def test_missing_directory_is_empty(self):
        assert await FakeGitHub().client().download_tree("o", "r", "nope") == {}
