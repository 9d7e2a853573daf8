"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from vinyl_vault.exceptions import ConfigurationError
from vinyl_vault.models.config import VaultConfig

log = logging.getLogger(__name__)

# Environment variables win over the file, matching how the token is usually provisioned
ENV_OVERRIDES = {
    "DISCOGS_TOKEN": "token",
    "DISCOGS_USERNAME": "username",
}


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> VaultConfig:
        """
        Loads configuration from the INI file, applies environment and CLI
        overrides, and validates it.

        A missing file is only an error when the environment does not supply
        the credentials either.

        Raises:
            ConfigurationError: If the config file is invalid or validation fails.
        """
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(f"Error parsing configuration file: {e}") from e

            if self._migrate_if_needed():
                log.info(
                    "[yellow]Configuration file was updated with new default values."
                    "[/yellow]"
                )
        elif not all(os.getenv(name) for name in ENV_OVERRIDES):
            raise ConfigurationError(
                f"Configuration file not found at '{self.config_file_path}'. "
                "Please run 'vinyl-vault init' first."
            )

        config = self._get_config_as_dict()
        for env_name, key in ENV_OVERRIDES.items():
            if value := os.getenv(env_name):
                config[key] = value

        if cli_options:
            config.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return VaultConfig(**config, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file, filling unspecified keys
        with the model defaults.
        """
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}

        defaults = VaultConfig.model_construct()
        for key in sorted(VaultConfig.get_ini_keys()):
            value = settings.get(key, getattr(defaults, key, None))
            if value is not None:
                config["DEFAULT"][key] = str(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        return {
            "token": section.get("token", ""),
            "username": section.get("username", ""),
            "user_agent": section.get("user_agent", "VinylVault/1.0"),
            "request_delay": section.getfloat("request_delay", 1.0),
            "requests_per_second": section.getfloat("requests_per_second", 1.0),
            "per_page": section.getint("per_page", 100),
            "max_pages": section.getint("max_pages", 10),
            "default_sort": section.get("default_sort", "added"),
            "currency": section.get("currency", "USD"),
            "marketplace_country": section.get("marketplace_country", "US"),
        }

    def get_display_dict(self) -> dict[str, Any]:
        """The file's settings as stored, for `--show-config`."""
        if self.config_file_path.is_file():
            self._parser.read(self.config_file_path, encoding="utf-8")
        return self._get_config_as_dict()

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = VaultConfig.model_construct()
        needs_saving = False

        config_section = self._parser["DEFAULT"]

        for key in sorted(VaultConfig.get_ini_keys()):
            if key in config_section:
                continue
            default_value = getattr(defaults, key, None)
            if default_value is None:
                continue
            config_section[key] = str(default_value)
            needs_saving = True
            log.debug(
                f"Migrating config: added missing key '{key}' with "
                f"value '{config_section[key]}'."
            )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving
