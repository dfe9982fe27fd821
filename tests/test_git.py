"""Tests for the git command-line client."""

from __future__ import annotations

import errno

import pytest

from skillsync.errors import CloneFailedError, GitNotInstalledError, PullFailedError
from skillsync.fs import MemoryFileSystem
from skillsync.remote.git import GitClient, ProcessResult, ProcessTimeout, clone_url, run_process


class RecordingRunner:
    def __init__(self, result: ProcessResult | None = None, error: Exception | None = None) -> None:
        self.result = result or ProcessResult(0, "", "")
        self.error = error
        self.calls: list[tuple[str, list[str], float]] = []

    async def __call__(self, executable, args, timeout):
        self.calls.append((executable, list(args), timeout))
        if self.error:
            raise self.error
        return self.result


class TestCloneUrl:
    @pytest.mark.parametrize("url,expected", [
        ("https://github.com/owner/repo", "https://github.com/owner/repo.git"),
        ("https://github.com/owner/repo/", "https://github.com/owner/repo.git"),
        ("https://github.com/owner/repo.git", "https://github.com/owner/repo.git"),
    ])
    def test_normalization(self, url, expected):
        assert clone_url(url) == expected


class TestGitClient:
    @pytest.mark.asyncio
    async def test_clone_arguments(self):
        runner = RecordingRunner()
        client = GitClient(executable="/usr/bin/git", timeout_seconds=5, runner=runner)

        await client.clone("https://github.com/owner/repo", "/tmp/cache/owner_repo")

        assert runner.calls == [(
            "/usr/bin/git",
            ["clone", "--depth", "1", "https://github.com/owner/repo.git", "/tmp/cache/owner_repo"],
            5,
        )]

    @pytest.mark.asyncio
    async def test_pull_arguments(self):
        runner = RecordingRunner()
        await GitClient(runner=runner).pull("/tmp/cache/owner_repo")
        assert runner.calls[0][1] == ["-C", "/tmp/cache/owner_repo", "pull", "--ff-only"]

    @pytest.mark.asyncio
    async def test_clone_failure_carries_stderr(self):
        runner = RecordingRunner(ProcessResult(128, "", "fatal: repository not found\n"))
        with pytest.raises(CloneFailedError) as exc_info:
            await GitClient(runner=runner).clone("https://github.com/o/r", "/tmp/x")
        assert exc_info.value.message == "fatal: repository not found"
        assert "Clone failed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_pull_failure_without_stderr(self):
        runner = RecordingRunner(ProcessResult(1, "", ""))
        with pytest.raises(PullFailedError) as exc_info:
            await GitClient(runner=runner).pull("/tmp/x")
        assert "exit code 1" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_executable(self):
        runner = RecordingRunner(error=FileNotFoundError("git"))
        with pytest.raises(GitNotInstalledError):
            await GitClient(runner=runner).clone("https://github.com/o/r", "/tmp/x")

    @pytest.mark.asyncio
    async def test_exec_error_maps_to_operation_error(self):
        runner = RecordingRunner(error=PermissionError(errno.EACCES, "Permission denied", "git"))
        with pytest.raises(CloneFailedError) as exc_info:
            await GitClient(runner=runner).clone("https://github.com/o/r", "/tmp/x")
        assert "Permission denied" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout_maps_to_operation_error(self):
        runner = RecordingRunner(error=ProcessTimeout("timed out after 1s"))
        with pytest.raises(PullFailedError):
            await GitClient(runner=runner).pull("/tmp/x")

    def test_is_repository(self):
        fs = MemoryFileSystem()
        fs.make_dirs("/clone/.git")
        fs.make_dirs("/plain")
        client = GitClient(fs=fs)
        assert client.is_repository("/clone")
        assert not client.is_repository("/plain")


class TestRunProcess:
    @pytest.mark.asyncio
    async def test_missing_executable_raises_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            await run_process("skillsync-no-such-binary", ["--version"], timeout=5)
