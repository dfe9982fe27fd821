"""Exception hierarchy for skillsync.

Source-level failures (missing directories, failed clone/pull, unreachable
API) are normally caught by the source adapters and degrade to an empty
result. The exceptions that reach callers are install/uninstall I/O
failures, repository reference validation errors and local edit errors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from skillsync.skills.models import SkillPackage


class SkillSyncError(Exception):
    """Base class for all skillsync errors."""


# ── parsing ──────────────────────────────────────────────────────────────────

class SkillParseError(SkillSyncError, ValueError):
    """A SKILL.md file could not be turned into a skill package."""


class MissingMetadataBlock(SkillParseError):
    def __init__(self) -> None:
        super().__init__("No metadata block delimited by '---' at the start of SKILL.md")


class MissingField(SkillParseError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Missing required field: {field}")


# ── version control ──────────────────────────────────────────────────────────

class GitError(SkillSyncError):
    """A git invocation failed."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


class GitNotInstalledError(GitError):
    def __init__(self, executable: str = "git") -> None:
        super().__init__(f"'{executable}' executable not found")


class CloneFailedError(GitError):
    def __str__(self) -> str:
        return f"Clone failed: {self.message}"


class PullFailedError(GitError):
    def __str__(self) -> str:
        return f"Pull failed: {self.message}"


# ── remote content API ───────────────────────────────────────────────────────

class RemoteAPIError(SkillSyncError):
    """The remote content API could not be reached or answered with an error."""


class RateLimitedError(RemoteAPIError):
    pass


class RemoteFileNotFound(RemoteAPIError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File not found in remote repository: {path}")


# ── install / uninstall ──────────────────────────────────────────────────────

class InstallError(SkillSyncError):
    """Install or uninstall I/O failure.

    ``skill`` is the skill record as it stands after the failure: providers
    that were installed before the failing one are already recorded on it.
    """

    action = "Install failed"

    def __init__(self, path: str, skill: "SkillPackage | None" = None) -> None:
        self.path = path
        self.skill = skill
        super().__init__(f"{self.action}: {path}")


class DirectoryCreationFailed(InstallError):
    action = "Could not create directory"


class FileWriteFailed(InstallError):
    action = "Could not write file"


class UninstallFailed(InstallError):
    action = "Could not remove directory"


class UnknownProviderError(SkillSyncError, ValueError):
    def __init__(self, provider: str, known: list[str] | None = None) -> None:
        self.provider = provider
        available = f" Available: {', '.join(known)}" if known else ""
        super().__init__(f"Unknown provider: {provider}.{available}")


# ── remote repository references ─────────────────────────────────────────────

class RepositoryReferenceError(SkillSyncError, ValueError):
    pass


class InvalidRepositoryURL(RepositoryReferenceError):
    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Invalid GitHub repository URL: {url!r}")


class DuplicateRepositoryError(RepositoryReferenceError):
    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Repository already added: {url}")


class RepositoryNotFound(RepositoryReferenceError):
    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"No repository reference matches {ref!r}")


# ── local editing ────────────────────────────────────────────────────────────

class SkillWriterError(SkillSyncError):
    pass


class NotEditableError(SkillWriterError):
    def __init__(self, display_id: str) -> None:
        super().__init__(f"Skill '{display_id}' is not a local skill and cannot be edited")


class SkillNotFoundError(SkillWriterError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Skill file not found: {path}")


class SkillWriteFailed(SkillWriterError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Could not write skill file: {path}")
