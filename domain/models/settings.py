"""
Settings Domain Model

Processing settings snapshot. The orchestrator receives one immutable
instance per batch run, so edits made while a batch is in flight never
reach jobs that already started.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, Optional

MIN_CEILING_DB = -6.0
MAX_CEILING_DB = -1.0


class SampleRate(IntEnum):
    """Supported output sample rates."""
    S44100 = 44100
    S48000 = 48000

    @property
    def tag(self) -> str:
        """Short tag used in output file names."""
        return "44k" if self == SampleRate.S44100 else "48k"


@dataclass(frozen=True)
class Settings:
    """Transcode settings."""

    sample_rate: SampleRate = SampleRate.S44100
    ceiling_db: float = -1.0
    output_directory: Optional[Path] = None

    def __post_init__(self):
        # Accept plain ints / strings from callers and storage
        object.__setattr__(self, 'sample_rate', SampleRate(int(self.sample_rate)))
        object.__setattr__(self, 'ceiling_db', float(self.ceiling_db))
        if self.output_directory is not None:
            object.__setattr__(self, 'output_directory', Path(self.output_directory))

        if not MIN_CEILING_DB <= self.ceiling_db <= MAX_CEILING_DB:
            raise ValueError(
                f"ceiling_db must be within [{MIN_CEILING_DB}, {MAX_CEILING_DB}], "
                f"got {self.ceiling_db}"
            )

    @property
    def ceiling_amplitude(self) -> float:
        """Limiter ceiling as linear amplitude."""
        return 10.0 ** (self.ceiling_db / 20.0)

    def with_changes(self, **changes: Any) -> Settings:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted dictionary form."""
        return {
            'sampleRate': int(self.sample_rate),
            'limitDb': self.ceiling_db,
            'outputDirectoryPath': str(self.output_directory) if self.output_directory else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Settings:
        """Build settings from the persisted dictionary form."""
        defaults = cls()
        return cls(
            sample_rate=data.get('sampleRate', int(defaults.sample_rate)),
            ceiling_db=data.get('limitDb', defaults.ceiling_db),
            output_directory=data.get('outputDirectoryPath') or None,
        )
