"""
Audio Analyzer

Computes RMS, peak and crest factor of an audio file in one streaming pass.
"""

from __future__ import annotations

import asyncio
import logging
import math
from pathlib import Path
from typing import Union

import numpy as np

from ...core.constants import CHUNK_FRAMES, LEVEL_FLOOR
from ...domain.exceptions import AnalysisError
from ...domain.models import AudioStats
from ...infrastructure.audio_engine import StreamingAudioReader

logger = logging.getLogger(__name__)


def to_dbfs(value: float) -> float:
    """Convert a linear level to dBFS, floored at about -240 dB for silence."""
    return 20.0 * math.log10(max(value, LEVEL_FLOOR))


class AudioAnalyzer:
    """
    Streaming loudness analyzer.

    RMS is measured on the mono mix (channel average); peak is the largest
    absolute sample over all channels before mixdown.
    """

    def __init__(self, chunk_frames: int = CHUNK_FRAMES):
        self.chunk_frames = chunk_frames

    def analyze(self, path: Union[str, Path]) -> AudioStats:
        """
        Analyze an audio file.

        Args:
            path: Path to the audio file

        Returns:
            AudioStats

        Raises:
            AnalysisError: If the file is missing, unreadable or empty
        """
        sum_squares = 0.0
        peak = 0.0

        with StreamingAudioReader(path, self.chunk_frames) as reader:
            for block in reader.chunks():
                mono = block.mean(axis=1, dtype=np.float64)
                sum_squares += float(np.dot(mono, mono))
                peak = max(peak, float(np.max(np.abs(block))))
            total_frames = reader.frames_read

        if total_frames == 0:
            raise AnalysisError("No frames to process")

        rms = math.sqrt(sum_squares / total_frames)
        stats = AudioStats.from_levels(to_dbfs(rms), to_dbfs(peak))
        logger.debug(
            f"Analyzed {Path(path).name}: rms={stats.rms:.2f} dB, "
            f"peak={stats.peak:.2f} dB, crest={stats.crest:.2f} dB"
        )
        return stats

    async def analyze_async(self, path: Union[str, Path]) -> AudioStats:
        """Run :meth:`analyze` in a worker thread."""
        return await asyncio.to_thread(self.analyze, path)
