"""Data models for skill packages and their origins."""

from __future__ import annotations

from datetime import datetime
from pathlib import PurePosixPath
from typing import Annotated, ClassVar, Literal, NamedTuple, Union

from pydantic import BaseModel, Field

from skillsync.utils import generate_uuid, now_utc

DEFAULT_VERSION = "1.0.0"


class LocalOrigin(BaseModel):
    """Skill found in a provider's installation directory."""
    kind: Literal["local"] = "local"
    provider: str

    is_local: ClassVar[bool] = True
    is_remote: ClassVar[bool] = False

    @property
    def display_name(self) -> str:
        return self.provider


class RemoteOrigin(BaseModel):
    """Skill from a remote repository (clone cache or contents API)."""
    kind: Literal["remote"] = "remote"
    repo_url: str

    is_local: ClassVar[bool] = False
    is_remote: ClassVar[bool] = True

    @property
    def display_name(self) -> str:
        last = self.repo_url.rstrip("/").rsplit("/", 1)[-1]
        if last.endswith(".git"):
            last = last[:-4]
        return last or "Remote"


class LocalDirectoryOrigin(BaseModel):
    """Skill found below an arbitrary local directory."""
    kind: Literal["local_directory"] = "local_directory"
    path: str

    is_local: ClassVar[bool] = False
    is_remote: ClassVar[bool] = False

    @property
    def display_name(self) -> str:
        return PurePosixPath(self.path).name or self.path


Origin = Annotated[
    Union[LocalOrigin, RemoteOrigin, LocalDirectoryOrigin],
    Field(discriminator="kind"),
]


class SkillPackage(BaseModel):
    """A parsed skill package.

    ``local_id`` is the folder name written under a provider directory.
    ``display_id`` is the cross-source identity: two packages with equal
    ``display_id`` are the same logical skill whatever their origin.

    Instances are treated as values; the ``installing``/``uninstalling``
    style helpers return updated copies.
    """
    local_id: str
    name: str
    description: str
    version: str = DEFAULT_VERSION
    content: str
    origin: Origin
    origin_sub_path: str | None = None
    unique_key: str | None = None
    installed_providers: frozenset[str] = Field(default_factory=frozenset)
    reference_count: int = 0
    script_count: int = 0

    @property
    def display_id(self) -> str:
        if self.unique_key:
            return self.unique_key
        if self.origin_sub_path:
            return f"{self.origin_sub_path}/{self.local_id}"
        return self.local_id

    @property
    def display_name(self) -> str:
        """Name for listings; non-local variants show where they were found."""
        if self.origin.is_local:
            return self.name
        if self.origin_sub_path:
            return f"{self.name} ({self.origin_sub_path})"
        return self.name

    @property
    def is_local(self) -> bool:
        return self.origin.is_local

    @property
    def is_remote(self) -> bool:
        return self.origin.is_remote

    @property
    def is_editable(self) -> bool:
        return self.is_local

    @property
    def is_installed(self) -> bool:
        return bool(self.installed_providers)

    @property
    def has_references(self) -> bool:
        return self.reference_count > 0

    @property
    def has_scripts(self) -> bool:
        return self.script_count > 0

    def is_installed_for(self, provider: str) -> bool:
        return provider in self.installed_providers

    def installing(self, provider: str) -> SkillPackage:
        return self.with_installed_providers(self.installed_providers | {provider})

    def uninstalling(self, provider: str) -> SkillPackage:
        return self.with_installed_providers(self.installed_providers - {provider})

    def with_installed_providers(self, providers: frozenset[str] | set[str]) -> SkillPackage:
        return self.model_copy(update={"installed_providers": frozenset(providers)})

    def updating(self, content: str) -> SkillPackage:
        return self.model_copy(update={"content": content})


class RemoteRepositoryReference(BaseModel):
    """A user-managed remote skills repository."""
    id: str = Field(default_factory=generate_uuid)
    url: str
    name: str
    added_at: datetime = Field(default_factory=now_utc)


class ScannedPackage(NamedTuple):
    """A package folder located by the scanner, not yet parsed."""
    folder_name: str
    parent_path: str
    content: str
    path: str
