"""
FileItem Domain Model

The collaborator-side record for one file added to a session.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from .analysis import AudioStats, WaveformData


class FileStatus(Enum):
    """Display status of a file."""
    PENDING = "pending"
    ANALYZING = "analyzing"
    READY = "ready"
    PROCESSING = "processing"
    PROCESSED = "processed"
    ERROR = "error"


@dataclass
class FileItem:
    """
    A file in the processing session.

    ``stats`` is set together with READY, ``output_path`` with PROCESSED and
    ``error`` with ERROR. ``analysis_stats`` keeps the last stats across the
    transition to PROCESSING so they remain visible after processing.
    """

    path: Path
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: FileStatus = FileStatus.PENDING
    stats: Optional[AudioStats] = None
    output_path: Optional[Path] = None
    error: Optional[str] = None
    waveform: Optional[WaveformData] = None
    output_waveform: Optional[WaveformData] = None
    analysis_stats: Optional[AudioStats] = None

    def __post_init__(self):
        if isinstance(self.path, str):
            self.path = Path(self.path)

    @property
    def current_stats(self) -> Optional[AudioStats]:
        if self.status == FileStatus.READY:
            return self.stats
        return self.analysis_stats

    def mark_analyzing(self) -> None:
        self.status = FileStatus.ANALYZING

    def mark_ready(self, stats: AudioStats) -> None:
        self.status = FileStatus.READY
        self.stats = stats
        self.error = None

    def mark_processing(self) -> None:
        self.status = FileStatus.PROCESSING

    def mark_processed(self, output_path: Path) -> None:
        self.status = FileStatus.PROCESSED
        self.output_path = output_path
        self.error = None

    def mark_error(self, message: str) -> None:
        self.status = FileStatus.ERROR
        self.error = message
