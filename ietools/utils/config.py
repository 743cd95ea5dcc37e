"""
Configuration Manager
====================

Manages tool settings and configuration.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, asdict

from ietools.core.exceptions import ConfigError


@dataclass
class DialogSettings:
    """Dialog structure settings."""
    d_folder: str = ""
    baf_folder: str = ""
    string_id_from: int = 0
    # None means up to the highest parsed ID
    string_id_to: Optional[int] = None

    def validate(self) -> None:
        if self.string_id_from < 0:
            raise ConfigError(f"String ID range must start at 0 or above, got {self.string_id_from}")
        if self.string_id_to is not None and self.string_id_from > self.string_id_to:
            raise ConfigError(
                f"Invalid string ID range {self.string_id_from}-{self.string_id_to}"
            )


@dataclass
class OutputSettings:
    """Names and location of generated reports."""
    output_directory: str = "."
    html_file: str = "DialogOverview.html"
    groups_file: str = "DialogGroups.txt"


@dataclass
class AppSettings:
    """General application settings."""
    # show info-level pipeline messages on the console
    verbose: bool = False


class ConfigManager:
    """Manages application configuration."""

    SECTIONS = {
        'dialog': 'dialog_settings',
        'output': 'output_settings',
        'app': 'app_settings',
    }

    def __init__(self, config_file: str = "config.json", load: bool = True):
        self.logger = logging.getLogger(__name__)
        self.config_file = Path(config_file)

        # Default configuration
        self.dialog_settings = DialogSettings()
        self.output_settings = OutputSettings()
        self.app_settings = AppSettings()

        if load:
            self.load_config()

    def load_config(self) -> bool:
        """Load configuration from file."""
        if not self.config_file.exists():
            self.logger.info("Config file doesn't exist, using defaults")
            return False

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Error loading configuration: {e}")
            return False

        self.apply_overrides(config_data)
        self.logger.info("Configuration loaded successfully")
        return True

    def apply_overrides(self, config_data: Dict[str, Any]) -> None:
        """Copy known keys of each settings section onto the current settings.

        Unknown sections and keys are ignored with a warning.
        """
        for section_name, values in config_data.items():
            attribute = section_name if section_name in self.SECTIONS.values() else self.SECTIONS.get(section_name)
            if attribute is None or not isinstance(values, dict):
                self.logger.warning(f"Ignoring unknown config section: {section_name}")
                continue
            settings = getattr(self, attribute)
            for key, value in values.items():
                if hasattr(settings, key):
                    setattr(settings, key, value)
                else:
                    self.logger.warning(f"Ignoring unknown setting {section_name}.{key}")

    def save_config(self) -> bool:
        """Save configuration to file."""
        config_data = {
            'dialog_settings': asdict(self.dialog_settings),
            'output_settings': asdict(self.output_settings),
            'app_settings': asdict(self.app_settings),
        }

        # Create backup if file exists
        if self.config_file.exists():
            backup_file = self.config_file.with_suffix('.json.bak')
            try:
                if backup_file.exists():
                    backup_file.unlink()
                self.config_file.rename(backup_file)
            except OSError as e:
                self.logger.warning(f"Could not create backup: {e}")

        try:
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(config_data, f, indent=4, ensure_ascii=False)
        except OSError as e:
            self.logger.error(f"Error saving configuration: {e}")
            return False

        self.logger.info("Configuration saved successfully")
        return True
