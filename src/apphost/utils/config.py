"""
Configuration management for the application host.

This module provides environment-driven settings using Pydantic settings,
the host options read from the merged text configuration, and the data
folder layout.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from apphost.utils.logging import setup_logging
from apphost.utils.text_config import TextFileConfiguration

logger = setup_logging(__name__)

APPLICATION_NAME_KEY = "appname"
DEBUG_ARGS_KEY = "debugargs"
CONFIGURATION_FILE_KEY = "conf"
DATA_DIR_KEY = "datadir"


class HostSettings(BaseSettings):
    """Host settings read from the environment."""

    # Application
    app_name: str = "apphost"
    app_version: str = "0.1.0"

    # Logging settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_structured: bool = Field(default=False, description="Emit JSON log records")
    log_to_file: bool = Field(default=False, description="Also write logs to the data folder")

    # Data folder
    data_dir_root: str = Field(default="~", description="Directory holding the per-application data directory")

    # Periodic reporting
    status_log_interval_seconds: float = Field(default=5.0, gt=0, description="Interval of the status log loop")
    benchmark_log_interval_seconds: float = Field(default=17.0, gt=0, description="Interval of the benchmark log loop")

    model_config = SettingsConfigDict(
        env_file="config/.env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="APPHOST_",
        extra="ignore",
    )

    def get_data_dir_root(self) -> Path:
        """Get the data directory root as Path object."""
        return Path(self.data_dir_root).expanduser().resolve()


class ApplicationHostOptions(BaseModel):
    """Options of the host taken from the merged configuration."""

    application_name: str = ""
    debug_args: list[str] = Field(default_factory=list)

    @classmethod
    def from_configuration(
        cls,
        configuration: TextFileConfiguration,
        application_name_fallback: str = ""
    ) -> "ApplicationHostOptions":
        application_name = configuration[APPLICATION_NAME_KEY] or application_name_fallback
        debug_args = configuration[DEBUG_ARGS_KEY] or ""
        return cls(
            application_name=application_name,
            debug_args=[arg.strip() for arg in debug_args.split(",") if arg.strip()],
        )


@dataclass(frozen=True)
class DataFolder:
    """Path locations to folders used by the host and its features.

    Folder location names end with ``path``.
    """

    root_path: Path
    log_path: Path
    applications_path: Path

    @classmethod
    def at(cls, path: Path) -> "DataFolder":
        return cls(root_path=path, log_path=path / "logs", applications_path=path / "apps")

    @classmethod
    def from_configuration(
        cls,
        configuration: TextFileConfiguration,
        settings: HostSettings,
        create: bool = True
    ) -> "DataFolder":
        """Resolve the data directory from ``-datadir`` or the settings root."""
        data_dir = configuration[DATA_DIR_KEY]
        if data_dir:
            path = Path(data_dir).expanduser().resolve()
        else:
            app_name = configuration[APPLICATION_NAME_KEY] or settings.app_name
            path = settings.get_data_dir_root() / f".{app_name.lower()}"

        if create:
            path.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Data directory initialized with path {path}")
        return cls.at(path)


def load_configuration(args: Iterable[str] | None = None) -> TextFileConfiguration:
    """Merge command line arguments with the configuration file they name.

    The file is given with ``-conf``; a relative path is taken relative to
    ``-datadir`` when one is set. Arguments win over file values.

    Raises:
        ConfigurationError: If the named configuration file does not exist
    """
    args = list(args or [])
    configuration = TextFileConfiguration(args)
    logger.debug(f"Arguments: args='{' '.join(args) if args else '(None)'}'")

    conf = configuration[CONFIGURATION_FILE_KEY]
    if conf:
        conf_path = Path(conf).expanduser()
        data_dir = configuration[DATA_DIR_KEY]
        if data_dir and not conf_path.is_absolute():
            conf_path = Path(data_dir).expanduser() / conf_path

        TextFileConfiguration.from_file(conf_path).merge_into(configuration)

    return configuration


# Global settings instance
settings = HostSettings()


def get_settings() -> HostSettings:
    """Get the global settings instance."""
    return settings


def reload_settings() -> HostSettings:
    """Reload settings from environment and return new instance."""
    global settings
    settings = HostSettings()
    return settings
