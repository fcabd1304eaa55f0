"""
Domain Exceptions Module

Contains domain-specific exceptions:
- ProcessingError: Base class for every processing failure
- InvalidInputError: Source file missing or unreadable
- ToolNotFoundError: ffmpeg/ffprobe executable not available
- LaunchFailedError: External tool could not be spawned
- TempDirectoryError: Job workspace could not be created
- ToolFailedError: External tool exited with a non-zero status
- OutputMissingError: Transcode produced no (or an empty) output file
- OutputConflictError: Another file in the batch targets the same output
- AnalysisError: Audio analysis / waveform generation failed
- InvalidTransitionError: Illegal job state transition
"""

from __future__ import annotations


class ProcessingError(Exception):
    """Base class for processing errors."""

    description = "Processing failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.description)


class InvalidInputError(ProcessingError):
    """Input file does not exist or cannot be read."""

    description = "Invalid input file"


class ToolNotFoundError(ProcessingError):
    """An external executable could not be located."""

    description = "FFmpeg executable not found"


class LaunchFailedError(ProcessingError):
    """Spawning the external process failed."""

    description = "Failed to launch external tool"


class TempDirectoryError(ProcessingError):
    """The job-scoped temporary directory could not be created."""

    description = "Failed to create temporary directory"


class ToolFailedError(ProcessingError):
    """External tool exited with a non-zero status."""

    def __init__(self, exit_code: int, message: str):
        self.exit_code = exit_code
        self.message = message
        super().__init__(f"FFmpeg failed ({exit_code}): {message}")


class OutputMissingError(ProcessingError):
    """The transcoder produced no usable output."""

    description = "Processing produced no output"


class OutputConflictError(ProcessingError):
    """Two inputs of one batch resolve to the same output file."""

    description = "Output file is already produced by another file in this batch"


class AnalysisError(ProcessingError):
    """Audio analysis failed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Audio analysis failed: {reason}")


class InvalidTransitionError(ValueError):
    """Raised when a job is moved to a state it cannot reach."""


__all__ = [
    "ProcessingError",
    "InvalidInputError",
    "ToolNotFoundError",
    "LaunchFailedError",
    "TempDirectoryError",
    "ToolFailedError",
    "OutputMissingError",
    "OutputConflictError",
    "AnalysisError",
    "InvalidTransitionError",
]
