"""
Configuration Management Module

Persists the processing settings record with JSON storage. The record lives
under a fixed storage key inside ``config.json`` so other sections can share
the file.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .constants import SETTINGS_STORAGE_KEY
from ..domain.models import Settings

logger = logging.getLogger(__name__)


@dataclass
class SettingsStore:
    """
    Loads and saves :class:`Settings` as JSON.

    Features:
    - Default value fallback for missing or corrupt records
    - Other top-level keys of the file are preserved on save
    """

    config_dir: Path
    config_file: str = "config.json"
    storage_key: str = SETTINGS_STORAGE_KEY

    def __post_init__(self):
        self.config_dir = Path(self.config_dir)

    @property
    def config_path(self) -> Path:
        """Get the full path to the configuration file."""
        return self.config_dir / self.config_file

    def _read_document(self) -> dict[str, Any]:
        if not self.config_path.exists():
            return {}
        with open(self.config_path, 'r', encoding='utf-8') as f:
            document = json.load(f)
        if not isinstance(document, dict):
            raise ValueError("configuration root must be an object")
        return document

    def load(self) -> Settings:
        """
        Load settings from file.

        Returns:
            Settings: The stored settings, or defaults when nothing valid is stored.
        """
        try:
            record = self._read_document().get(self.storage_key)
            if record is None:
                logger.info("Using default settings")
                return Settings()
            settings = Settings.from_dict(record)
            logger.info(f"Settings loaded from {self.config_path}")
            return settings

        except json.JSONDecodeError as e:
            logger.error(f"Invalid configuration file: {e}")
        except (ValueError, TypeError, AttributeError) as e:
            logger.error(f"Invalid settings record: {e}")
        except OSError as e:
            logger.error(f"Failed to load configuration: {e}")

        return Settings()

    def save(self, settings: Settings) -> bool:
        """
        Save settings to file.

        Returns:
            bool: True if saved successfully.
        """
        try:
            try:
                document = self._read_document()
            except (json.JSONDecodeError, ValueError):
                logger.warning(f"Overwriting unreadable configuration file {self.config_path}")
                document = {}

            document[self.storage_key] = settings.to_dict()

            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2, ensure_ascii=False)

            logger.info(f"Settings saved to {self.config_path}")
            return True

        except PermissionError as e:
            logger.error(f"Permission denied saving configuration to {self.config_path}: {e}")
            return False
        except OSError as e:
            logger.error(f"Failed to save configuration to {self.config_path}: {e}", exc_info=True)
            return False


# Global settings store instance
_settings_store: Optional[SettingsStore] = None


def get_settings_store() -> SettingsStore:
    """Get the global settings store in the runtime config directory."""
    global _settings_store
    if _settings_store is None:
        from ..runtime.runtime_config import get_config_dir
        _settings_store = SettingsStore(config_dir=get_config_dir())
    return _settings_store
