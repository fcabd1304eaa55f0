"""
Bootstrap Module

Initializes logging before the command line front end starts processing.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


class BootstrapError(Exception):
    """Exception raised during bootstrap process."""
    pass


class RuntimeBootstrap:
    """
    Handles the bootstrap process.

    This class is responsible for:
    - Console logging configuration
    - Rotating file logging in the logs directory
    """

    def __init__(self):
        """Initialize the bootstrap handler."""
        self._initialized = False
        self._warnings: list[str] = []

    @property
    def warnings(self) -> list[str]:
        """Get any warnings from bootstrap."""
        return self._warnings.copy()

    def bootstrap(self, verbose: bool = False, logs_dir: Optional[Path] = None) -> bool:
        """
        Perform the bootstrap process.

        Args:
            verbose: Log at DEBUG level on the console.
            logs_dir: Directory for the rotating log file (runtime default if None).

        Returns:
            bool: True if bootstrap was successful.

        Raises:
            BootstrapError: If a critical error occurs during bootstrap.
        """
        if self._initialized:
            logger.debug("Bootstrap already completed")
            return True

        try:
            logging.basicConfig(
                level=logging.DEBUG if verbose else logging.INFO,
                format=LOG_FORMAT,
            )
            self._initialize_file_logging(logs_dir)
        except Exception as e:
            raise BootstrapError(f"Bootstrap failed: {e}") from e

        self._initialized = True
        for warning in self._warnings:
            logger.warning(warning)
        return True

    def _initialize_file_logging(self, logs_dir: Optional[Path]) -> None:
        """Attach a rotating file handler to the root logger."""
        if logs_dir is None:
            from .runtime_config import get_logs_dir
            logs_dir = get_logs_dir()

        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
            log_file = logs_dir / "wavshaver.log"

            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5,
                encoding="utf-8"
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logging.getLogger().addHandler(file_handler)

            logger.debug(f"Log file: {log_file}")

        except Exception as e:
            self._warnings.append(f"Could not set up file logging: {e}")


# Global bootstrap instance
_bootstrap: Optional[RuntimeBootstrap] = None


def get_bootstrap() -> RuntimeBootstrap:
    """
    Get the global bootstrap instance.

    Returns:
        RuntimeBootstrap: The bootstrap handler.
    """
    global _bootstrap
    if _bootstrap is None:
        _bootstrap = RuntimeBootstrap()
    return _bootstrap


def bootstrap(verbose: bool = False, logs_dir: Optional[Path] = None) -> bool:
    """
    Perform the runtime bootstrap.

    Args:
        verbose: Log at DEBUG level on the console.
        logs_dir: Directory for the rotating log file.

    Returns:
        bool: True if bootstrap was successful.

    Raises:
        BootstrapError: If bootstrap fails.
    """
    return get_bootstrap().bootstrap(verbose=verbose, logs_dir=logs_dir)
