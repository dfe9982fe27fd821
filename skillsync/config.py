"""Configuration management for skillsync."""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_DIR = Path("~/.skillsync").expanduser()
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"


def _substitute_env_vars(value: Any) -> Any:
    """Recursively substitute environment variables in config values.

    Supports ${VAR_NAME} and ${VAR_NAME:-default} syntax.
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}:]+)(?::-([^}]*))?\}'

        def replacer(match: re.Match) -> str:
            var_name = match.group(1)
            default = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default)

        return re.sub(pattern, replacer, value)
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]
    return value


class ProviderConfig(BaseModel):
    """A provider and the directory its skills are installed in."""
    name: str
    display_name: str = ""
    skills_path: Path

    @field_validator("skills_path")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()


def _default_providers() -> list[ProviderConfig]:
    return [
        ProviderConfig(name="claude", display_name="Claude Code", skills_path=Path("~/.claude/skills")),
        ProviderConfig(name="codex", display_name="Codex", skills_path=Path("~/.codex/skills/public")),
    ]


class CacheConfig(BaseModel):
    """Clone cache configuration."""
    directory: Path = DEFAULT_CONFIG_DIR / "cache"

    @field_validator("directory")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()


class GitConfig(BaseModel):
    """git executable configuration."""
    executable: str = "git"
    timeout_seconds: int = 120


class GitHubConfig(BaseModel):
    """GitHub API configuration."""
    api_url: str = "https://api.github.com"
    raw_url: str = "https://raw.githubusercontent.com"
    token: str | None = None
    branches: list[str] = Field(default_factory=lambda: ["main", "master"])
    timeout_seconds: int = 30
    # False lists remote repositories over the contents API instead of cloning
    use_clone: bool = True


class StorageConfig(BaseModel):
    """Persisted state configuration."""
    repositories_file: Path = DEFAULT_CONFIG_DIR / "repositories.json"

    @field_validator("repositories_file")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()


class ScanConfig(BaseModel):
    """Directory scanning configuration."""
    max_depth: int = 5
    hidden_allowlist: list[str] = Field(default_factory=lambda: [".claude", ".codex", ".agent", ".gemini"])


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "WARNING"
    format: str = "text"


class Config(BaseSettings):
    """Main skillsync configuration."""
    model_config = SettingsConfigDict(env_prefix="SKILLSYNC_", env_nested_delimiter="__")

    providers: list[ProviderConfig] = Field(default_factory=_default_providers)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self.providers]


def load_config(config_path: str | Path = DEFAULT_CONFIG_PATH) -> Config:
    """Load configuration from YAML file with environment variable substitution.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Loaded and validated Config object.
    """
    config_path = Path(config_path).expanduser()

    if not config_path.exists():
        # Return default config if file doesn't exist
        return Config()

    with open(config_path) as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        return Config()

    # Substitute environment variables
    config_data = _substitute_env_vars(raw_config)

    return Config(**config_data)


def generate_default_config() -> str:
    """Return the default configuration file content."""
    return """\
# skillsync configuration
# Environment variables can be substituted with ${VAR_NAME} syntax

# Providers skills can be installed for
providers:
  - name: claude
    display_name: "Claude Code"
    skills_path: "~/.claude/skills"
  - name: codex
    display_name: "Codex"
    skills_path: "~/.codex/skills/public"

cache:
  directory: "${SKILLSYNC_CACHE_DIR:-~/.skillsync/cache}"

git:
  executable: "git"
  timeout_seconds: 120

github:
  api_url: "https://api.github.com"
  raw_url: "https://raw.githubusercontent.com"
  token: "${GITHUB_TOKEN:-}"
  branches:
    - main
    - master
  timeout_seconds: 30
  use_clone: true  # false: read over the contents API, no clone

storage:
  repositories_file: "~/.skillsync/repositories.json"

scan:
  max_depth: 5
  hidden_allowlist:
    - .claude
    - .codex
    - .agent
    - .gemini

logging:
  level: "WARNING"
  format: "text"  # or "json"
"""


def write_default_config(path: str | Path = DEFAULT_CONFIG_PATH) -> Path:
    """Write the default configuration file.

    Args:
        path: Path to write the configuration file.
    """
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_default_config())
    return path
