"""
Streaming Audio Reader

Opens an audio file with soundfile and yields fixed-size float32 blocks of
shape ``(frames, channels)`` so callers never hold the whole file in memory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional, Union

import numpy as np
import soundfile as sf

from ...core.constants import CHUNK_FRAMES
from ...domain.exceptions import AnalysisError

logger = logging.getLogger(__name__)


class StreamingAudioReader:
    """
    Chunked reader shared by analysis and waveform generation.

    Usage:
        with StreamingAudioReader(path) as reader:
            for block in reader.chunks():
                ...

    A read error after at least one block ends iteration (the data read so
    far is kept); a read error before any block raises ``AnalysisError``.
    """

    def __init__(self, path: Union[str, Path], chunk_frames: int = CHUNK_FRAMES):
        self.path = Path(path)
        self.chunk_frames = chunk_frames
        self.frames_read = 0
        self._file: Optional[sf.SoundFile] = None

    def open(self) -> StreamingAudioReader:
        if not self.path.exists():
            raise AnalysisError("File does not exist")

        try:
            self._file = sf.SoundFile(str(self.path))
        except (RuntimeError, OSError) as e:
            raise AnalysisError(f"Could not open audio file: {e}") from e

        if self._file.frames <= 0:
            self.close()
            raise AnalysisError("Audio file is empty")

        return self

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> StreamingAudioReader:
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @property
    def _sound_file(self) -> sf.SoundFile:
        if self._file is None:
            raise RuntimeError("reader is not open")
        return self._file

    @property
    def channels(self) -> int:
        return self._sound_file.channels

    @property
    def frames(self) -> int:
        """Total frames reported by the file header."""
        return self._sound_file.frames

    @property
    def sample_rate(self) -> int:
        return self._sound_file.samplerate

    def chunks(self) -> Iterator[np.ndarray]:
        """Yield float32 blocks of shape ``(frames, channels)``."""
        sound_file = self._sound_file
        sound_file.seek(0)
        self.frames_read = 0

        while True:
            try:
                block = sound_file.read(self.chunk_frames, dtype='float32', always_2d=True)
            except (RuntimeError, OSError) as e:
                if self.frames_read > 0:
                    logger.warning(
                        f"Read error in {self.path.name} after {self.frames_read} frames, "
                        f"using partial data: {e}"
                    )
                    return
                raise AnalysisError(f"Error reading audio: {e}") from e

            if len(block) == 0:
                return

            self.frames_read += len(block)
            yield block
