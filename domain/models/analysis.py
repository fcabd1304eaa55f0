"""
Analysis Domain Models

Read-only value objects produced by the analysis services and consumed by
the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class AudioStats:
    """
    Loudness statistics of one audio file.

    All values are in decibels: ``rms`` and ``peak`` relative to full scale,
    ``crest`` is the peak-to-RMS ratio (always ``peak - rms``).
    """

    rms: float
    peak: float
    crest: float

    @classmethod
    def from_levels(cls, rms_db: float, peak_db: float) -> AudioStats:
        """Build stats from the two measured levels."""
        return cls(rms=rms_db, peak=peak_db, crest=peak_db - rms_db)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'rms': self.rms,
            'peak': self.peak,
            'crest': self.crest,
        }


@dataclass(frozen=True)
class WaveformData:
    """Downsampled waveform for display."""

    samples: Tuple[float, ...]  # signed bucket mean of the mono mix
    peaks: Tuple[float, ...]  # bucket max of absolute per-frame peak
    channel_count: int

    def __post_init__(self):
        if len(self.samples) != len(self.peaks):
            raise ValueError("samples and peaks must have the same length")
        if self.channel_count < 1:
            raise ValueError("channel_count must be >= 1")

    @property
    def bucket_count(self) -> int:
        return len(self.samples)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'samples': list(self.samples),
            'peaks': list(self.peaks),
            'channel_count': self.channel_count,
        }
