"""
Tool Locator

Resolves the ffmpeg/ffprobe executables used for transcoding and probing.

Lookup order:
1. Primary bundled location (``<resources>/bin``)
2. Secondary bundled location (``<resources>``)
3. A private temporary copy: both tools are copied from the bundle (or from
   PATH when nothing is bundled) and marked executable.

The result is resolved once per process and cached; concurrent first callers
share a single resolution.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import stat
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ...core.constants import PROBE_NAME, TRANSCODER_NAME
from ...domain.exceptions import ToolNotFoundError

logger = logging.getLogger(__name__)

# rwxr-xr-x
EXECUTABLE_MODE = stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH


@dataclass(frozen=True)
class ToolPaths:
    """Resolved executable paths."""
    transcoder_path: Path
    probe_path: Path


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def _executable_name(name: str) -> str:
    return f"{name}.exe" if sys.platform == "win32" else name


class ToolLocator:
    """
    Locates and caches the external tool paths.

    Features:
    - Bundled resource lookup (primary, secondary)
    - Temporary-copy fallback with execute permission fix-up
    - Thread-safe single-flight memoisation
    """

    def __init__(
        self,
        search_dirs: Optional[Sequence[Path]] = None,
        temp_bin_dir: Optional[Path] = None,
        transcoder_name: str = TRANSCODER_NAME,
        probe_name: str = PROBE_NAME,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        """
        Initialize the locator.

        Args:
            search_dirs: Bundled locations in lookup order (runtime default if None)
            temp_bin_dir: Directory for the private copy (runtime default if None)
            transcoder_name: Transcoder executable name
            probe_name: Prober executable name
            which: PATH lookup used as copy source when nothing is bundled
        """
        if search_dirs is None or temp_bin_dir is None:
            from ...runtime.runtime_config import get_runtime_config
            paths = get_runtime_config().paths
            if search_dirs is None:
                search_dirs = paths.tool_search_dirs
            if temp_bin_dir is None:
                temp_bin_dir = paths.temp_bin_dir

        self.search_dirs: List[Path] = [Path(d) for d in search_dirs]
        self.temp_bin_dir = Path(temp_bin_dir)
        self.transcoder_name = _executable_name(transcoder_name)
        self.probe_name = _executable_name(probe_name)
        self._which = which

        self._paths: Optional[ToolPaths] = None
        self._lock = threading.Lock()
        self.resolution_count = 0

    @property
    def cached_paths(self) -> Optional[ToolPaths]:
        return self._paths

    def ensure_tools(self) -> ToolPaths:
        """
        Return the tool paths, resolving them on first use.

        Raises:
            ToolNotFoundError: If no location yields both executables.
        """
        paths = self._paths
        if paths is not None:
            return paths

        with self._lock:
            if self._paths is None:
                self.resolution_count += 1
                self._paths = self._locate_tools()
                logger.info(
                    f"Using {self._paths.transcoder_path} and {self._paths.probe_path}"
                )
            return self._paths

    async def ensure_tools_async(self) -> ToolPaths:
        """Async variant of :meth:`ensure_tools`; resolution runs in a thread."""
        paths = self._paths
        if paths is not None:
            return paths
        return await asyncio.to_thread(self.ensure_tools)

    def _locate_tools(self) -> ToolPaths:
        for directory in self.search_dirs:
            transcoder = directory / self.transcoder_name
            probe = directory / self.probe_name
            if _is_executable(transcoder) and _is_executable(probe):
                logger.debug(f"Found bundled tools in {directory}")
                return ToolPaths(transcoder_path=transcoder, probe_path=probe)

        return self._copy_to_temp()

    def _copy_to_temp(self) -> ToolPaths:
        try:
            self.temp_bin_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ToolNotFoundError(f"Cannot create tool directory {self.temp_bin_dir}: {e}") from e

        transcoder = self._copy_tool(self.transcoder_name)
        probe = self._copy_tool(self.probe_name)
        return ToolPaths(transcoder_path=transcoder, probe_path=probe)

    def _copy_tool(self, name: str) -> Path:
        destination = self.temp_bin_dir / name

        if destination.exists():
            if _is_executable(destination):
                return destination
            try:
                destination.unlink()
            except OSError as e:
                logger.warning(f"Could not remove stale copy {destination}: {e}")

        source = self._find_source(name)
        if source is None:
            raise ToolNotFoundError(f"{name} executable not found")

        try:
            shutil.copy2(source, destination)
            os.chmod(destination, EXECUTABLE_MODE)
        except OSError as e:
            raise ToolNotFoundError(f"Cannot copy {name} to {destination}: {e}") from e

        if not _is_executable(destination):
            raise ToolNotFoundError(f"{destination} is not executable")

        logger.debug(f"Copied {source} to {destination}")
        return destination

    def _find_source(self, name: str) -> Optional[Path]:
        for directory in self.search_dirs:
            candidate = directory / name
            if candidate.is_file():
                return candidate

        found = self._which(name)
        return Path(found) if found else None


# Global tool locator instance
_tool_locator: Optional[ToolLocator] = None
_tool_locator_lock = threading.Lock()


def get_tool_locator() -> ToolLocator:
    """Get the process-wide tool locator."""
    global _tool_locator
    with _tool_locator_lock:
        if _tool_locator is None:
            _tool_locator = ToolLocator()
        return _tool_locator


def ensure_tools() -> ToolPaths:
    """Resolve the tool paths with the process-wide locator."""
    return get_tool_locator().ensure_tools()
