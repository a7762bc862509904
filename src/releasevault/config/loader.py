"""Locate, load and cache ReleaseVault settings.

An explicit path wins; otherwise the first file found by
``default_config_paths`` is used, and with none found the settings come
from environment variables alone (``.env`` included).
The loaded ``Settings`` object is cached process-wide.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from dotenv import load_dotenv

from releasevault.config.settings import Settings
from releasevault.shared.errors import ConfigurationError, create_config_error
from releasevault.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

HOME_CONFIG_DIR = ".releasevault"
CONFIG_FILE_NAME = "releasevault.toml"


def default_config_paths() -> list[Path]:
    """Locations searched, in order, when no configuration path is given."""
    return [
        Path("config") / CONFIG_FILE_NAME,
        Path(CONFIG_FILE_NAME),
        Path.home() / HOME_CONFIG_DIR / CONFIG_FILE_NAME,
    ]


def _load_env_file(env_file: Path | None = None) -> None:
    """Load variables from a .env file if one exists; existing variables win."""
    env_file = env_file or Path(".env")
    if env_file.exists():
        load_dotenv(env_file, override=False)
        logger.debug("Loaded environment from %s", env_file)


def _read_settings(config_path: str | Path | None) -> Settings:
    candidates = [Path(config_path)] if config_path else default_config_paths()
    for path in candidates:
        if not path.exists():
            continue
        try:
            return Settings.from_toml_file(path)
        except Exception as e:
            raise create_config_error(
                f"Invalid settings file: {e}",
                source=str(path),
                original_error=e,
            ) from e

    if config_path:
        raise create_config_error(
            f"Configuration file not found: {config_path}",
            source=str(config_path),
        )
    return Settings()


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML file or the environment.

    Args:
        config_path: Optional TOML file. When omitted the default locations
            are tried, then environment variables alone are used.

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If the file is missing or invalid. The error is
            logged before it is raised.
    """
    _load_env_file()
    try:
        return _read_settings(config_path)
    except ConfigurationError as error:
        log_operation_error(logger, error, operation="load_settings")
        raise


class SettingsLoader:
    """Process-wide cache of the loaded Settings.

    Uses double-checked locking to keep the common path lock-free.
    """

    _instance: Settings | None = None
    _lock: threading.RLock = threading.RLock()

    def get_config(self) -> Settings:
        """Get the global settings instance, loading it if necessary."""
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings()
        return self._instance

    def reload_config(self) -> Settings:
        """Reload the global settings instance from configuration files."""
        with self._lock:
            self._instance = load_settings()
        return self._instance


_loader = SettingsLoader()


def get_config() -> Settings:
    """Get the global settings instance (thread-safe)."""
    return _loader.get_config()


def reload_config() -> Settings:
    """Reload the global settings instance."""
    return _loader.reload_config()


__all__ = [
    "SettingsLoader",
    "default_config_paths",
    "get_config",
    "load_settings",
    "reload_config",
]
