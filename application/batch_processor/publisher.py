"""
Output Publisher

Job workspace lifecycle and atomic publication of finished files.
"""

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ...domain.exceptions import OutputMissingError, TempDirectoryError

logger = logging.getLogger(__name__)


@contextmanager
def job_workspace(prefix: str) -> Iterator[Path]:
    """
    Private temporary directory for one job, removed on exit.

    Raises:
        TempDirectoryError: If the directory cannot be created
    """
    try:
        workspace = Path(tempfile.mkdtemp(prefix=prefix))
    except OSError as e:
        raise TempDirectoryError(f"Failed to create temporary directory: {e}") from e

    try:
        yield workspace
    finally:
        try:
            shutil.rmtree(workspace)
        except OSError as e:
            logger.warning(f"Failed to clean up {workspace}: {e}")


def validate_output(path: Path) -> None:
    """Raise OutputMissingError unless *path* is a non-empty file."""
    try:
        size = path.stat().st_size
    except OSError:
        size = 0
    if size <= 0:
        raise OutputMissingError()


def publish(temp_path: Path, final_path: Path) -> None:
    """Atomically move *temp_path* over *final_path* (same directory)."""
    os.replace(temp_path, final_path)
    logger.info(f"Published {final_path}")


def discard(path: Path) -> None:
    """Best-effort removal of a leftover file."""
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to remove {path}: {e}")
