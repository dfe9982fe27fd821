"""Thin async wrapper around the git command line."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from skillsync.errors import CloneFailedError, GitError, GitNotInstalledError, PullFailedError
from skillsync.fs import FileSystem, LocalFileSystem, PathLike
from skillsync.utils import get_logger, truncate_string

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


ProcessRunner = Callable[[str, Sequence[str], float], Awaitable[ProcessResult]]


class ProcessTimeout(Exception):
    """Raised by a process runner when the command exceeded its timeout."""


async def run_process(executable: str, args: Sequence[str], timeout: float) -> ProcessResult:
    """Run a command and capture its output.

    Raises:
        FileNotFoundError: The executable does not exist
        ProcessTimeout: The command ran longer than ``timeout`` seconds; it has been killed
    """
    process = await asyncio.create_subprocess_exec(
        executable,
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise ProcessTimeout(f"timed out after {timeout}s") from None

    return ProcessResult(
        exit_code=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


def clone_url(url: str) -> str:
    """Normalize a repository URL for cloning.

    >>> clone_url("https://github.com/anthropics/skills/")
    'https://github.com/anthropics/skills.git'
    """
    url = url.rstrip("/")
    return url if url.endswith(".git") else f"{url}.git"


class GitClient:
    """Runs ``git clone`` / ``git pull`` as subprocesses.

    Args:
        executable: git binary name or path
        fs: File system used for repository detection
        timeout_seconds: Per-command timeout
        runner: Process runner, replaceable in tests
    """

    def __init__(
        self,
        executable: str = "git",
        fs: FileSystem | None = None,
        timeout_seconds: float = 120.0,
        runner: ProcessRunner | None = None,
    ) -> None:
        self.executable = executable
        self.fs = fs or LocalFileSystem()
        self.timeout_seconds = timeout_seconds
        self._runner = runner or run_process

    async def _run(self, args: list[str], error_cls: type[GitError]) -> ProcessResult:
        logger.debug("Running git", extra={"git_args": args})
        try:
            result = await self._runner(self.executable, args, self.timeout_seconds)
        except FileNotFoundError:
            raise GitNotInstalledError(self.executable) from None
        except ProcessTimeout as e:
            raise error_cls(str(e)) from None
        except OSError as e:
            logger.warning("Could not run git", extra={"git_args": args, "error": str(e)})
            raise error_cls(str(e)) from e

        if not result.ok:
            message = result.stderr.strip() or f"exit code {result.exit_code}"
            logger.warning(
                "git command failed",
                extra={"git_args": args, "exit_code": result.exit_code, "stderr": truncate_string(message)},
            )
            raise error_cls(message)
        return result

    async def clone(self, url: str, destination: PathLike) -> None:
        """Shallow-clone ``url`` into ``destination``.

        Raises:
            CloneFailedError: git exited non-zero, timed out or could not be started
            GitNotInstalledError: git is not available
        """
        await self._run(
            ["clone", "--depth", "1", clone_url(url), str(destination)],
            CloneFailedError,
        )

    async def pull(self, path: PathLike) -> None:
        """Fast-forward an existing clone.

        Raises:
            PullFailedError: git exited non-zero, timed out or could not be started
            GitNotInstalledError: git is not available
        """
        await self._run(["-C", str(path), "pull", "--ff-only"], PullFailedError)

    def is_repository(self, path: PathLike) -> bool:
        return self.fs.is_dir(Path(path) / ".git")
