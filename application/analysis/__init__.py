"""
Analysis Module

Streaming analysis of audio files for display:
- AudioAnalyzer: RMS / peak / crest statistics
- WaveformGenerator: Bucketed waveform summary
"""

from .analyzer import AudioAnalyzer, to_dbfs
from .waveform import WaveformGenerator, bucket_layout

__all__ = [
    'AudioAnalyzer',
    'to_dbfs',
    'WaveformGenerator',
    'bucket_layout',
]
