"""
Audio Engine Module

Contains audio decoding components:
- StreamingAudioReader: Chunked float32 reading using soundfile
"""

from .reader import StreamingAudioReader

__all__ = ['StreamingAudioReader']
