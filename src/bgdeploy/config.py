"""Configuration management for bgdeploy using Pydantic."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bgdeploy.core.exceptions import ConfigError
from bgdeploy.core.logging import LogLevel


class CredentialsSettings(BaseSettings):
    """Cloud Foundry credentials read from ``CF_USERNAME`` and ``CF_PASSWORD``."""

    model_config = SettingsConfigDict(env_prefix="CF_", extra="ignore")

    username: str = ""
    password: str = ""

    def require(self) -> "CredentialsSettings":
        """Return self, or raise ConfigError naming every missing variable."""
        missing = [
            f"CF_{name.upper()}"
            for name in ("username", "password")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigError(f"missing environment variables: {', '.join(missing)}")
        return self


class CloudFoundryConfig(BaseModel):
    """Settings for the ``cf`` CLI courier."""

    binary: str = "cf"
    timeout: int | None = None  # seconds per cf command, None waits forever

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int | None) -> int | None:
        if v is not None and v <= 0:
            raise ValueError("timeout must be positive")
        return v


class EnvironmentConfig(BaseModel):
    """A deployment environment: a domain and the foundations serving it."""

    name: str
    domain: str
    foundations: list[str] = Field(default_factory=list)
    skip_ssl: bool = False
    instances: int = Field(default=1, ge=0)

    def get_foundation(self, url: str | None = None) -> str:
        """Pick the foundation to deploy to.

        An explicit ``url`` must belong to this environment. Without one the
        environment must have exactly one foundation.
        """
        if url:
            if url not in self.foundations:
                raise ConfigError(
                    f"Foundation '{url}' is not part of environment '{self.name}'"
                )
            return url
        if len(self.foundations) != 1:
            raise ConfigError(
                f"Environment '{self.name}' has {len(self.foundations)} foundations; "
                "choose one with --foundation"
            )
        return self.foundations[0]


class GlobalConfig(BaseModel):
    """Global settings."""

    color: str = "auto"  # auto, always, never
    verbosity: LogLevel = LogLevel.INFO

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if v not in ("auto", "always", "never"):
            raise ValueError("color must be 'auto', 'always', or 'never'")
        return v


class BGDeployConfig(BaseModel):
    """Main configuration model."""

    model_config = {"populate_by_name": True}

    version: str = "1"
    global_settings: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    cf: CloudFoundryConfig = Field(default_factory=CloudFoundryConfig)
    environments: dict[str, EnvironmentConfig] = Field(default_factory=dict)

    def get_environment(self, name: str) -> EnvironmentConfig:
        """Get an environment by key, case-insensitively."""
        for key, environment in self.environments.items():
            if key.lower() == name.lower():
                return environment
        raise ConfigError(f"Environment '{name}' not found")


class ConfigLoader:
    """Loads and merges configuration from multiple sources."""

    CONFIG_FILENAMES = ["bgdeploy.yaml", "bgdeploy.yml", ".bgdeploy.yaml", ".bgdeploy.yml"]

    def __init__(self):
        self._config: BGDeployConfig | None = None

    def load(self, config_file: str | Path | None = None) -> BGDeployConfig:
        """Load configuration from files.

        Priority (highest to lowest):
        1. Explicitly specified config file
        2. Project config (./bgdeploy.yaml)
        3. User config (~/.bgdeploy/config.yaml)

        Args:
            config_file: Optional explicit config file path

        Returns:
            Merged configuration
        """
        configs: list[dict[str, Any]] = []

        user_config_path = Path.home() / ".bgdeploy" / "config.yaml"
        if user_config_path.exists():
            configs.append(self._load_yaml_file(user_config_path))

        project_config = self._find_project_config()
        if project_config:
            configs.append(self._load_yaml_file(project_config))

        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ConfigError(f"Config file not found: {config_file}")
            configs.append(self._load_yaml_file(config_path))

        merged = self._merge_configs(configs)

        try:
            self._config = BGDeployConfig(**merged)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}")
        return self._config

    def _find_project_config(self) -> Path | None:
        """Find project config file in current or parent directories."""
        current = Path.cwd()

        while current != current.parent:
            for filename in self.CONFIG_FILENAMES:
                config_path = current / filename
                if config_path.exists():
                    return config_path
            current = current.parent

        return None

    def _load_yaml_file(self, path: Path) -> dict[str, Any]:
        """Load a YAML config file."""
        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}")
        if not isinstance(content, dict):
            raise ConfigError(f"Invalid config in {path}: expected a mapping")
        return content

    def _merge_configs(self, configs: list[dict[str, Any]]) -> dict[str, Any]:
        """Deep merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = self._deep_merge(result, config)
        return result

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


_config_loader = ConfigLoader()


def load_config(config_file: str | Path | None = None) -> BGDeployConfig:
    """Load bgdeploy configuration.

    Args:
        config_file: Optional explicit config file path

    Returns:
        Loaded configuration
    """
    return _config_loader.load(config_file)


def get_default_config() -> BGDeployConfig:
    """Get default configuration without loading from files."""
    return BGDeployConfig()


def load_credentials() -> CredentialsSettings:
    """Read Cloud Foundry credentials from the environment.

    Raises:
        ConfigError: If CF_USERNAME or CF_PASSWORD is unset
    """
    return CredentialsSettings().require()
