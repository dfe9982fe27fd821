"""Provider installation directories."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from skillsync.errors import UnknownProviderError

if TYPE_CHECKING:
    from skillsync.config import Config

DEFAULT_PROVIDER_PATHS: dict[str, Path] = {
    "claude": Path("~/.claude/skills"),
    "codex": Path("~/.codex/skills/public"),
}

DEFAULT_DISPLAY_NAMES: dict[str, str] = {
    "claude": "Claude Code",
    "codex": "Codex",
}


class ProviderPathResolver:
    """Maps provider names to the directory their skills are installed in.

    Example:
        >>> resolver = ProviderPathResolver({"claude": Path("/tmp/claude")})
        >>> resolver.skills_path("claude")
        PosixPath('/tmp/claude')
    """

    def __init__(
        self,
        paths: Mapping[str, Path | str] | None = None,
        display_names: Mapping[str, str] | None = None,
    ) -> None:
        source = DEFAULT_PROVIDER_PATHS if paths is None else paths
        self._paths = {name: Path(p).expanduser() for name, p in source.items()}
        self._display_names = dict(display_names or {})

    @classmethod
    def from_config(cls, config: Config) -> ProviderPathResolver:
        return cls(
            paths={p.name: p.skills_path for p in config.providers},
            display_names={p.name: p.display_name for p in config.providers if p.display_name},
        )

    @property
    def providers(self) -> list[str]:
        return list(self._paths)

    def __contains__(self, provider: object) -> bool:
        return provider in self._paths

    def skills_path(self, provider: str) -> Path:
        """Installation directory of ``provider``.

        Raises:
            UnknownProviderError: ``provider`` is not configured
        """
        try:
            return self._paths[provider]
        except KeyError:
            raise UnknownProviderError(provider, self.providers) from None

    def display_name(self, provider: str) -> str:
        if provider in self._display_names:
            return self._display_names[provider]
        return DEFAULT_DISPLAY_NAMES.get(provider, provider.title())
