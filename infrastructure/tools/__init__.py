"""
External Tools Module

Locates the ffmpeg/ffprobe executables.
"""

from .locator import ToolLocator, ToolPaths, ensure_tools, get_tool_locator

__all__ = [
    'ToolLocator',
    'ToolPaths',
    'ensure_tools',
    'get_tool_locator',
]
