"""
WavShaver - Batch Resampler and True-Peak Limiter

Prepares audio files for distribution: each file is resampled to 44.1 kHz or
48 kHz 24-bit PCM WAV and limited to a configurable true-peak ceiling, with
up to three files processed at once.

Architecture:
- Application Layer: Analysis, batch processing and the session facade
- Domain Layer: Settings, jobs, files, analysis results and errors
- Infrastructure Layer: Tool location, subprocess execution, audio reading
- Runtime Layer: Paths, logging bootstrap
"""

__version__ = "1.0.0"
__author__ = "WavShaver Team"
__description__ = "Batch resampler and true-peak limiter"
