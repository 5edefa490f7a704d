"""
Configuration settings for the pipeline registry.

This module provides a settings class with support for loading
configuration from TOML files and environment variables.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)


class DatabaseDriver(str, Enum):
    """Supported database drivers."""

    SQLITE = "sqlite+aiosqlite"
    POSTGRESQL = "postgresql+asyncpg"


class Settings(BaseSettings):
    """Main settings class for the pipeline registry.

    Values come from environment variables (``PPLREG_`` prefix) first,
    then from ``settings.toml`` and ``settings.custom.toml``.
    """

    model_config = SettingsConfigDict(
        toml_file=["settings.toml", "settings.custom.toml"], env_prefix="PPLREG_", extra="ignore"
    )

    # Server settings
    port: int = 8000
    host: str = "127.0.0.1"
    root_url: str = "/"
    debug: bool = False

    # Storage settings
    storage_path: str = str(Path.home() / "pipeline_registry/data")

    # Database settings
    database_driver: DatabaseDriver = DatabaseDriver.SQLITE
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "pipeline_registry"
    database_username: str = "postgres"
    database_password: str = "postgres"

    # Access settings
    root_users: list[str] = ["root"]

    # Pipeline settings
    max_desc_length: int = 1024
    default_yaml_path: str = "./run.yaml"
    default_max_keys: int = 50
    max_keys_limit: int = 1000

    # Key material for pagination markers
    marker_secret: str = "insecure-change-this-marker-secret"

    # Logging settings
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: str | None = None  # If None, will use {storage_path}/logs
    log_rotation: str = "20 MB"
    log_retention: str = "1 week"
    log_format: str | None = None  # Use default if None
    log_serialize: bool = False

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the sources for settings.

        Priority order: explicit init kwargs, environment variables, then TOML config files
        """
        return init_settings, env_settings, TomlConfigSettingsSource(settings_cls)

    @property
    def database_url(self) -> str:
        """Async SQLAlchemy URL of the configured database."""
        driver = self.database_driver.value
        if self.database_driver == DatabaseDriver.SQLITE:
            return f"{driver}:///{self.database_name}.db"
        credentials = f"{self.database_username}:{self.database_password}"
        location = f"{self.database_host}:{self.database_port}"
        return f"{driver}://{credentials}@{location}/{self.database_name}"

    def get_log_dir(self) -> Path:
        """Get the log directory path.

        Returns:
            Path to the log directory. Uses log_dir if specified,
            otherwise creates logs directory in storage_path.
        """
        if self.log_dir:
            return Path(self.log_dir)
        return Path(self.storage_path) / "logs"


@lru_cache
def get_settings() -> Settings:
    """Get the settings instance, with caching.

    Returns:
        Cached Settings instance
    """
    return Settings()


# Create a global settings instance for easy imports
settings = get_settings()
