"""
Domain Models Module

Contains all domain models for WavShaver.
"""

from .analysis import AudioStats, WaveformData
from .settings import Settings, SampleRate, MIN_CEILING_DB, MAX_CEILING_DB
from .job import Job, JobInput, JobResult, JobStatus
from .file_item import FileItem, FileStatus

__all__ = [
    # Analysis
    "AudioStats",
    "WaveformData",
    # Settings
    "Settings",
    "SampleRate",
    "MIN_CEILING_DB",
    "MAX_CEILING_DB",
    # Jobs
    "Job",
    "JobInput",
    "JobResult",
    "JobStatus",
    # Files
    "FileItem",
    "FileStatus",
]
