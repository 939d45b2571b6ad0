"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any, Literal, Tuple, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


def load_yaml_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Priority:
    1. Explicitly provided config_path
    2. ~/.shipyard/config.yaml (default location)
    3. Empty dict if no file exists

    Args:
        config_path: Optional path to config file

    Returns:
        Dictionary of configuration values (flattened from nested YAML)
    """
    if config_path is None:
        config_path = Path.home() / ".shipyard" / "config.yaml"

    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            yaml_data = yaml.safe_load(f) or {}

        flattened = {}

        if "docker" in yaml_data:
            docker = yaml_data["docker"]
            if "binary" in docker:
                flattened["docker_binary"] = docker["binary"]
            if "command_timeout_seconds" in docker:
                flattened["docker_command_timeout_seconds"] = docker[
                    "command_timeout_seconds"
                ]

        if "startup" in yaml_data:
            startup = yaml_data["startup"]
            if "poll_interval_seconds" in startup:
                flattened["poll_interval_seconds"] = startup["poll_interval_seconds"]
            if "default_timeout_seconds" in startup:
                flattened["default_startup_timeout_seconds"] = startup[
                    "default_timeout_seconds"
                ]

        if "output" in yaml_data:
            output = yaml_data["output"]
            if "property_prefix" in output:
                flattened["property_prefix"] = output["property_prefix"]
            if "state_file" in output:
                flattened["state_file"] = output["state_file"]

        if "logging" in yaml_data:
            logging = yaml_data["logging"]
            if "level" in logging:
                flattened["log_level"] = logging["level"]
            if "format" in logging:
                flattened["log_format"] = logging["format"]

        return flattened

    except Exception as e:
        import warnings

        warnings.warn(f"Failed to load config from {config_path}: {e}")
        return {}


_config_path: Path | None = None


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Settings source that reads the YAML config file."""

    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        """Not used since we override __call__."""
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return load_yaml_config(_config_path)


class Settings(BaseSettings):
    """
    Shipyard configuration settings.

    Configuration priority (highest to lowest):
    1. Environment variables (e.g., SHIPYARD_POLL_INTERVAL_SECONDS=0.2)
    2. YAML configuration file (~/.shipyard/config.yaml)
    3. Default values defined in this class
    """

    model_config = SettingsConfigDict(
        env_prefix="SHIPYARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    docker_binary: str = Field(
        default="docker", description="Container engine CLI executable"
    )
    docker_command_timeout_seconds: int = Field(
        default=60,
        ge=1,
        description="Timeout for a single docker CLI invocation",
    )

    poll_interval_seconds: float = Field(
        default=0.5,
        gt=0,
        le=10,
        description="Pause between log polls while waiting for startup",
    )
    default_startup_timeout_seconds: int = Field(
        default=30,
        ge=1,
        description="Startup timeout for containers that do not declare one",
    )

    property_prefix: str = Field(
        default="",
        description="Prefix prepended to published property keys",
    )
    state_file: Path = Field(
        default=Path(".shipyard/state.json"),
        description="Where started containers are recorded for later cleanup",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text", description="Log format"
    )

    @field_validator("state_file")
    @classmethod
    def validate_state_file(cls, v: Path) -> Path:
        """Expand ~ in the state file path."""
        return v.expanduser()

    @field_validator("property_prefix")
    @classmethod
    def validate_property_prefix(cls, v: str) -> str:
        """Ensure a non-empty prefix ends with a dot."""
        if v and not v.endswith("."):
            v = f"{v}."
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """
        Customize settings sources priority.

        Priority order (highest to lowest):
        1. Explicit kwargs (init_settings) - for testing and programmatic config
        2. Environment variables
        3. YAML configuration file
        4. .env file
        5. Field defaults
        """
        return (
            init_settings,
            env_settings,
            YamlSettingsSource(settings_cls),
            dotenv_settings,
        )


_settings: Settings | None = None


def get_settings(config_path: Path | None = None, reload: bool = False) -> Settings:
    """
    Get global settings instance.

    Args:
        config_path: Optional path to YAML config file (defaults to ~/.shipyard/config.yaml)
        reload: If True, force reload settings (useful for testing)

    Returns:
        Settings instance with merged configuration
    """
    global _settings, _config_path
    if _settings is None or reload:
        _config_path = config_path

        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
