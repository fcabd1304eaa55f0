"""
Waveform Generator

Builds a fixed-resolution waveform summary for display in one streaming
pass. Memory use is proportional to the bucket count, not the file length.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np

from ...core.constants import CHUNK_FRAMES, DEFAULT_WAVEFORM_BUCKETS
from ...domain.exceptions import AnalysisError
from ...domain.models import WaveformData
from ...infrastructure.audio_engine import StreamingAudioReader

logger = logging.getLogger(__name__)


def bucket_layout(total_frames: int, target_bucket_count: int = DEFAULT_WAVEFORM_BUCKETS) -> Tuple[int, int]:
    """
    Compute the bucket layout for a file.

    Returns:
        ``(samples_per_bucket, bucket_count)`` where
        ``samples_per_bucket = max(1, total_frames // target)`` and
        ``bucket_count = ceil(total_frames / samples_per_bucket)``.
    """
    if total_frames <= 0:
        raise ValueError("total_frames must be positive")
    samples_per_bucket = max(1, total_frames // max(1, target_bucket_count))
    bucket_count = -(-total_frames // samples_per_bucket)
    return samples_per_bucket, bucket_count


class WaveformGenerator:
    """
    Streaming waveform generator.

    For each bucket:
    - sample: mean of the signed mono mix
    - peak: max over frames of the largest absolute channel sample
    """

    def __init__(self, chunk_frames: int = CHUNK_FRAMES):
        self.chunk_frames = chunk_frames

    def generate(
        self,
        path: Union[str, Path],
        target_bucket_count: int = DEFAULT_WAVEFORM_BUCKETS,
    ) -> WaveformData:
        """
        Generate waveform data for a file.

        Args:
            path: Path to the audio file
            target_bucket_count: Desired number of display points

        Returns:
            WaveformData

        Raises:
            AnalysisError: If the file is missing, unreadable or empty
        """
        with StreamingAudioReader(path, self.chunk_frames) as reader:
            channels = reader.channels
            samples_per_bucket, bucket_count = bucket_layout(reader.frames, target_bucket_count)

            sums = np.zeros(bucket_count, dtype=np.float64)
            peaks = np.zeros(bucket_count, dtype=np.float64)
            counts = np.zeros(bucket_count, dtype=np.int64)
            global_frame = 0

            for block in reader.chunks():
                frames = len(block)
                indices = np.arange(global_frame, global_frame + frames) // samples_per_bucket
                global_frame += frames

                # Frames past the last bucket are dropped
                in_range = indices < bucket_count
                if not in_range.any():
                    continue
                indices = indices[in_range]
                block = block[in_range]

                mono = block.mean(axis=1, dtype=np.float64)
                frame_peaks = np.abs(block).max(axis=1)

                sums += np.bincount(indices, weights=mono, minlength=bucket_count)
                counts += np.bincount(indices, minlength=bucket_count)
                np.maximum.at(peaks, indices, frame_peaks)

            if reader.frames_read == 0:
                raise AnalysisError("No frames to process")

        means = np.divide(sums, counts, out=np.zeros_like(sums), where=counts > 0)

        logger.debug(
            f"Waveform for {Path(path).name}: {bucket_count} buckets of "
            f"{samples_per_bucket} frames, {channels} ch"
        )
        return WaveformData(
            samples=tuple(means.tolist()),
            peaks=tuple(peaks.tolist()),
            channel_count=channels,
        )

    async def generate_async(
        self,
        path: Union[str, Path],
        target_bucket_count: int = DEFAULT_WAVEFORM_BUCKETS,
    ) -> WaveformData:
        """Run :meth:`generate` in a worker thread."""
        return await asyncio.to_thread(self.generate, path, target_bucket_count)
