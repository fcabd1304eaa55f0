"""
Output Naming

Derives the output file name and directory for a job. The file name is a
pure function of the input path and the settings; the directory is the first
writable candidate among the custom directory, the input's directory, a
``Music/WavShaver`` fallback (created on demand) and the desktop.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from ...core.constants import MUSIC_SUBDIR
from ...domain.models import Settings

logger = logging.getLogger(__name__)


def format_ceiling_tag(ceiling_db: float) -> str:
    """
    Format the limiter ceiling for file names.

    ``-1`` -> ``"-1dB"``, ``-2.5`` -> ``"-2.5dB"``, ``-2.25`` -> ``"-2.25dB"``.
    """
    text = f"{ceiling_db:.2f}"
    while "." in text and (text.endswith("0") or text.endswith(".")):
        text = text[:-1]
    return f"{text}dB"


def output_filename(input_path: Path, settings: Settings) -> str:
    """``{stem}-{rateTag}shaved-{ceilingTag}.wav``"""
    stem = Path(input_path).stem
    return f"{stem}-{settings.sample_rate.tag}shaved-{format_ceiling_tag(settings.ceiling_db)}.wav"


def hidden_temp_path(output_path: Path, job_id: str) -> Path:
    """Hidden temporary file next to the final destination, private to one job."""
    return output_path.parent / f".{output_path.name}.{job_id}.tmp"


def is_writable_dir(path: Path) -> bool:
    return path.is_dir() and os.access(path, os.W_OK)


def resolve_output_dir(
    input_path: Path,
    settings: Settings,
    home: Optional[Path] = None,
) -> Path:
    """
    Pick the output directory for an input file.

    Args:
        input_path: Source file
        settings: Settings snapshot (custom output directory)
        home: User home directory (``Path.home()`` if None)

    Returns:
        The first writable candidate; the desktop is returned unchecked.
    """
    if settings.output_directory is not None and is_writable_dir(settings.output_directory):
        return settings.output_directory

    here = Path(input_path).parent
    if is_writable_dir(here):
        return here

    home = home or Path.home()
    music = home / "Music" / MUSIC_SUBDIR
    try:
        music.mkdir(parents=True, exist_ok=True)
        return music
    except OSError as e:
        logger.warning(f"Cannot create fallback output directory {music}: {e}")

    return home / "Desktop"


def resolve_output_path(
    input_path: Path,
    settings: Settings,
    home: Optional[Path] = None,
) -> Path:
    """Full output path for an input file."""
    return resolve_output_dir(input_path, settings, home) / output_filename(input_path, settings)
