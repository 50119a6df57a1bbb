"""Configuration manager for vdicompact."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..models.config import Settings
from ..tools.exceptions import ConfigError


class ConfigManager:
    """Manage the optional vdicompact settings file."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize config manager.

        Args:
            config_dir: Custom config directory (defaults to ~/.config/vdicompact)
        """
        if config_dir is None:
            config_dir = Path.home() / ".config" / "vdicompact"
        self.config_dir = config_dir
        self.config_file = self.config_dir / "config.yaml"
        self._settings: Settings | None = None

    def exists(self) -> bool:
        """Check if config file exists.

        Returns:
            True if config file exists
        """
        return self.config_file.exists()

    def load(self) -> Settings:
        """Load settings from file.

        A missing file yields the defaults.

        Returns:
            Loaded settings

        Raises:
            ConfigError: If the config file is invalid
        """
        if not self.exists():
            self._settings = Settings()
            return self._settings

        try:
            with open(self.config_file, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to read config: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {self.config_file} must contain a mapping")

        try:
            self._settings = Settings(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings in {self.config_file}: {e}")
        return self._settings

    def save(self, settings: Settings) -> None:
        """Save settings to file.

        Args:
            settings: Settings to save

        Raises:
            ConfigError: If save fails
        """
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            data = settings.model_dump(exclude_none=True, exclude_defaults=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False)
            self._settings = settings
        except OSError as e:
            raise ConfigError(f"Failed to save config: {e}")

    def get(self) -> Settings:
        """Get current settings, loading if necessary.

        Returns:
            Current settings
        """
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def set_value(self, key: str, value: Any) -> Settings:
        """Set one setting and persist it.

        Args:
            key: Setting name
            value: New value (strings are coerced by the model)

        Returns:
            Updated settings

        Raises:
            ConfigError: If the key is unknown or the value invalid
        """
        if key not in Settings.model_fields:
            raise ConfigError(
                f"Unknown setting '{key}'. Available settings: "
                f"{', '.join(Settings.model_fields)}"
            )

        data = self.get().model_dump()
        data[key] = value
        try:
            settings = Settings(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid value for '{key}': {e.errors()[0]['msg']}")

        self.save(settings)
        return settings

    def unset_value(self, key: str) -> Settings:
        """Reset one setting to its default.

        Raises:
            ConfigError: If the key is unknown
        """
        if key not in Settings.model_fields:
            raise ConfigError(f"Unknown setting '{key}'")

        data = self.get().model_dump()
        data.pop(key, None)
        settings = Settings(**data)
        self.save(settings)
        return settings
