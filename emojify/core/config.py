"""Configuration management for state paths and the reference data feed.

Loads configuration from a .env file, an optional YAML file and
environment variables (in increasing order of precedence).
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError

DEFAULT_RELEASE_FEED = "https://api.github.com/repos/unicode-org/cldr/releases/latest"
DEFAULT_ASSET_PATTERN = r"^cldr-common-.*\.zip$"


def _default_state_dir() -> Path:
    base = os.getenv("XDG_STATE_HOME") or str(Path.home() / ".local" / "state")
    return Path(base) / "emojify"


def _default_config_file() -> Path:
    base = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "emojify" / "config.yaml"


# Environment variable -> config field
ENV_VARS = {
    "EMOJIFY_STATE_DIR": "state_dir",
    "EMOJIFY_LOCALE": "locale",
    "EMOJIFY_RELEASE_FEED": "release_feed_url",
    "EMOJIFY_ASSET_PATTERN": "asset_pattern",
    "EMOJIFY_HTTP_TIMEOUT": "http_timeout",
    "GITHUB_TOKEN": "github_token",
}


@dataclass
class EmojifyConfig:
    """Runtime configuration."""

    # Where the unpacked reference data lives
    state_dir: Path = field(default_factory=_default_state_dir)

    # CLDR locale of the annotation table (e.g. "en", "de")
    locale: str = "en"

    # GitHub "latest release" endpoint and the asset to pick from it
    release_feed_url: str = DEFAULT_RELEASE_FEED
    asset_pattern: str = DEFAULT_ASSET_PATTERN

    # Optional - raises the GitHub API rate limit
    github_token: Optional[str] = None

    http_timeout: float = 60.0

    def __post_init__(self) -> None:
        self.state_dir = Path(self.state_dir).expanduser()
        try:
            self.http_timeout = float(self.http_timeout)
        except (TypeError, ValueError):
            raise ConfigurationError(
                "http_timeout", f"expected a number, got {self.http_timeout!r}"
            )
        if self.http_timeout <= 0:
            raise ConfigurationError("http_timeout", "must be positive")
        if not self.locale:
            raise ConfigurationError("locale", "must not be empty")

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> "EmojifyConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(unknown[0], "unknown configuration key")
        return cls(**values)

    @classmethod
    def from_env(cls, base: Optional[dict[str, Any]] = None) -> "EmojifyConfig":
        """Load configuration from environment variables over ``base``."""
        values = dict(base or {})
        for env_name, key in ENV_VARS.items():
            value = os.getenv(env_name)
            if value:
                values[key] = value
        return cls.from_mapping(values)

    @classmethod
    def load(
        cls,
        env_file: Optional[Path] = None,
        config_file: Optional[Path] = None,
    ) -> "EmojifyConfig":
        """
        Load configuration from .env, YAML file and environment variables.

        Args:
            env_file: Optional path to .env file. If not provided,
                      looks for .env in the current directory.
            config_file: Optional YAML file. If not provided, uses
                         $XDG_CONFIG_HOME/emojify/config.yaml when present.

        Returns:
            EmojifyConfig instance with loaded values
        """
        if env_file:
            load_dotenv(env_file)
        else:
            env_path = Path.cwd() / ".env"
            if env_path.exists():
                load_dotenv(env_path)

        values: dict[str, Any] = {}
        path = config_file or _default_config_file()
        if config_file and not config_file.exists():
            raise ConfigurationError("config_file", f"{config_file} does not exist")
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError("config_file", f"{path}: {e}")
            if not isinstance(loaded, dict):
                raise ConfigurationError("config_file", f"{path} must contain a mapping")
            values.update(loaded)

        return cls.from_env(values)

    @property
    def reference_root(self) -> Path:
        """Directory holding ``annotations/`` and ``annotationsDerived/``."""
        return self.state_dir / "cldr"


# Global config instance (lazy loaded)
_config: Optional[EmojifyConfig] = None


def get_config() -> EmojifyConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = EmojifyConfig.load()
    return _config


def reload_config(
    env_file: Optional[Path] = None,
    config_file: Optional[Path] = None,
) -> EmojifyConfig:
    """Reload configuration from environment."""
    global _config
    _config = EmojifyConfig.load(env_file, config_file)
    return _config
