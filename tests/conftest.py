"""Shared fixtures for skillsync tests."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from skillsync.fs import MemoryFileSystem
from skillsync.remote.cache import CloneCacheManager
from skillsync.remote.git import GitClient, ProcessResult
from skillsync.skills.providers import ProviderPathResolver

CLAUDE_ROOT = "/home/user/.claude/skills"
CODEX_ROOT = "/home/user/.codex/skills/public"
CACHE_ROOT = "/home/user/.skillsync/cache"


def skill_md(name: str, description: str = "A test skill.", version: str | None = None, body: str = "") -> str:
    """Build a minimal valid SKILL.md."""
    lines = ["---", f"name: {name}", f"description: {description}"]
    if version:
        lines.append(f"version: {version}")
    lines.append("---")
    return "\n".join(lines) + f"\n\n# {name}\n{body}"


class FakeGitRunner:
    """Process runner standing in for the git binary.

    ``clone`` materializes the files registered for the clone URL below the
    destination, plus a ``.git`` directory. Every invocation is recorded.
    """

    def __init__(self, fs: MemoryFileSystem, repos: dict[str, dict[str, str]] | None = None) -> None:
        self.fs = fs
        self.repos = repos or {}
        self.calls: list[list[str]] = []
        self.exit_code = 0
        self.stderr = ""
        self.missing = False
        self.error: OSError | None = None

    async def __call__(self, executable: str, args: Sequence[str], timeout: float) -> ProcessResult:
        if self.missing:
            raise FileNotFoundError(executable)
        if self.error is not None:
            raise self.error
        self.calls.append(list(args))
        if self.exit_code:
            return ProcessResult(self.exit_code, "", self.stderr)
        if args[0] == "clone":
            url, destination = args[3], args[4]
            self.fs.make_dirs(f"{destination}/.git")
            for relative, content in self.repos.get(url, {}).items():
                self.fs.add_file(f"{destination}/{relative}", content)
        return ProcessResult(0, "", "")

    @property
    def commands(self) -> list[str]:
        return ["pull" if call[0] == "-C" else call[0] for call in self.calls]


@pytest.fixture
def fs() -> MemoryFileSystem:
    return MemoryFileSystem()


@pytest.fixture
def resolver() -> ProviderPathResolver:
    return ProviderPathResolver({"claude": Path(CLAUDE_ROOT), "codex": Path(CODEX_ROOT)})


@pytest.fixture
def git_runner(fs: MemoryFileSystem) -> FakeGitRunner:
    return FakeGitRunner(fs)


@pytest.fixture
def cache(fs: MemoryFileSystem, git_runner: FakeGitRunner) -> CloneCacheManager:
    git = GitClient(fs=fs, runner=git_runner)
    return CloneCacheManager(CACHE_ROOT, git=git, fs=fs)
