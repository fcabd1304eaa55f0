"""
Runtime Configuration Module

Detects the runtime mode (frozen executable vs. source checkout) and builds
the paths the application uses: bundled resources (where ffmpeg/ffprobe are
shipped), user data, configuration, logs and the private temporary copy
location for the external tools.
"""

from __future__ import annotations

import os
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.constants import APP_NAME


@dataclass
class RuntimePaths:
    """Container for all runtime-related paths."""

    # Base application directory
    app_root: Path

    # Bundled resources
    resources_dir: Path
    bundled_bin_dir: Path

    # Application data paths
    data_dir: Path
    config_dir: Path
    logs_dir: Path

    # Private copy of the external tools
    temp_bin_dir: Path

    @property
    def tool_search_dirs(self) -> list[Path]:
        """Bundled tool locations in lookup order (primary, secondary)."""
        return [self.bundled_bin_dir, self.resources_dir]


@dataclass
class RuntimeConfig:
    """Configuration of the current runtime environment."""

    is_frozen: bool = False  # True if running from PyInstaller
    paths: Optional[RuntimePaths] = None

    # PyInstaller internal directory (if frozen)
    _internal_dir: Optional[Path] = None

    @classmethod
    def detect(cls) -> RuntimeConfig:
        """
        Detect the current runtime configuration.

        Returns:
            RuntimeConfig: Detected configuration for the current environment.
        """
        config = cls()
        config.is_frozen = getattr(sys, 'frozen', False)

        if config.is_frozen:
            exe_path = os.path.abspath(sys.executable)
            app_root = Path(exe_path).parent

            # PyInstaller onedir puts data files in _internal, onefile in _MEIPASS
            meipass = getattr(sys, '_MEIPASS', None)
            internal_dir = Path(meipass) if meipass else app_root / "_internal"
            if internal_dir.exists():
                config._internal_dir = internal_dir
        else:
            # Running from source - the wavshaver package root
            app_root = Path(__file__).parent.parent

        config.paths = cls._build_paths(app_root, config._internal_dir)
        return config

    @staticmethod
    def _build_paths(app_root: Path, internal_dir: Optional[Path] = None) -> RuntimePaths:
        """
        Build all runtime paths based on the application root.

        Args:
            app_root: Root directory of the application.
            internal_dir: PyInstaller data directory when frozen.

        Returns:
            RuntimePaths: Container with all configured paths.
        """
        if internal_dir and internal_dir.exists():
            resources_dir = internal_dir / "resources"
        else:
            resources_dir = app_root / "resources"

        data_dir = Path(os.environ.get(
            "WAVSHAVER_DATA_DIR",
            Path.home() / f".{APP_NAME.lower()}",
        ))
        config_dir = Path(os.environ.get("WAVSHAVER_CONFIG_DIR", data_dir / "config"))

        return RuntimePaths(
            app_root=app_root,
            resources_dir=resources_dir,
            bundled_bin_dir=resources_dir / "bin",
            data_dir=data_dir,
            config_dir=config_dir,
            logs_dir=data_dir / "logs",
            temp_bin_dir=Path(tempfile.gettempdir()) / APP_NAME / "bin",
        )


# Global runtime configuration instance
_runtime_config: Optional[RuntimeConfig] = None


def get_runtime_config() -> RuntimeConfig:
    """
    Get the global runtime configuration, detecting it if necessary.

    Returns:
        RuntimeConfig: The current runtime configuration.
    """
    global _runtime_config
    if _runtime_config is None:
        _runtime_config = RuntimeConfig.detect()
    return _runtime_config


def get_config_dir() -> Path:
    """
    Get the configuration directory.

    Returns:
        Path: Configuration directory path.
    """
    return get_runtime_config().paths.config_dir


def get_logs_dir() -> Path:
    """Get the logs directory."""
    return get_runtime_config().paths.logs_dir
