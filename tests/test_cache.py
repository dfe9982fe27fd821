"""Tests for the clone cache manager."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from skillsync.errors import CloneFailedError, InvalidRepositoryURL, PullFailedError
from skillsync.remote.cache import CloneCacheManager

from tests.conftest import CACHE_ROOT, skill_md

URL = "https://github.com/anthropics/skills"
CLONE = f"{CACHE_ROOT}/anthropics_skills"


class TestCacheDir:
    def test_owner_repo_directory(self, cache: CloneCacheManager):
        assert cache.cache_dir_for(URL) == Path(CLONE)
        assert cache.cache_dir_for(URL + ".git/") == Path(CLONE)

    def test_invalid_url(self, cache: CloneCacheManager):
        with pytest.raises(InvalidRepositoryURL):
            cache.cache_dir_for("https://github.com/only-owner")


class TestSync:
    @pytest.mark.asyncio
    async def test_cache_root_that_is_a_file(self, cache, git_runner, fs):
        fs.add_file(CACHE_ROOT, "not a directory")

        with pytest.raises(CloneFailedError):
            await cache.sync(URL)
        assert git_runner.calls == []

    @pytest.mark.asyncio
    async def test_clones_when_missing(self, cache, git_runner, fs):
        git_runner.repos[URL + ".git"] = {"skills/pdf/SKILL.md": skill_md("pdf")}

        directory = await cache.sync(URL)

        assert directory == Path(CLONE)
        assert git_runner.commands == ["clone"]
        assert fs.exists(f"{CLONE}/skills/pdf/SKILL.md")
        assert cache.has_cache(URL)

    @pytest.mark.asyncio
    async def test_pulls_when_cloned(self, cache, git_runner):
        await cache.sync(URL)
        await cache.sync(URL)
        assert git_runner.commands == ["clone", "pull"]

    @pytest.mark.asyncio
    async def test_removes_incomplete_clone(self, cache, git_runner, fs):
        fs.add_file(f"{CLONE}/partial.txt", "x")

        await cache.sync(URL)

        assert git_runner.commands == ["clone"]
        assert not fs.exists(f"{CLONE}/partial.txt")

    @pytest.mark.asyncio
    async def test_pull_failure_keeps_clone(self, cache, git_runner, fs):
        await cache.sync(URL)
        git_runner.exit_code = 1
        git_runner.stderr = "fatal: Not possible to fast-forward"

        with pytest.raises(PullFailedError):
            await cache.sync(URL)
        assert fs.is_dir(f"{CLONE}/.git")

    @pytest.mark.asyncio
    async def test_clone_failure(self, cache, git_runner):
        git_runner.exit_code = 128
        with pytest.raises(CloneFailedError):
            await cache.sync(URL)
        assert not cache.has_cache(URL)

    @pytest.mark.asyncio
    async def test_concurrent_syncs_are_serialized(self, cache, git_runner):
        await asyncio.gather(cache.sync(URL), cache.sync(URL), cache.sync(URL))
        assert git_runner.commands == ["clone", "pull", "pull"]


class TestEvict:
    @pytest.mark.asyncio
    async def test_evict_removes_clone(self, cache, fs):
        await cache.sync(URL)
        assert await cache.evict(URL) is True
        assert not fs.exists(CLONE)
        assert not cache.has_cache(URL)

    @pytest.mark.asyncio
    async def test_evict_without_clone(self, cache):
        assert await cache.evict(URL) is False
