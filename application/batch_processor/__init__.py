"""
Batch Processor Module

Two-stage ffmpeg transcode of audio files with bounded concurrency.

Features:
- Resample to 44.1/48 kHz 24-bit PCM WAV
- Oversampled true-peak limiting
- Sliding-window worker pool (3 jobs in flight)
- Atomic publication of finished files
- Batch cancellation with partial results
"""

from .cancellation import CancellationToken, JobCancelled
from .naming import (
    format_ceiling_tag,
    hidden_temp_path,
    output_filename,
    resolve_output_dir,
    resolve_output_path,
)
from .transcoder import (
    AudioCodec,
    FFmpegTranscoder,
    build_limiter_args,
    build_probe_args,
    build_resample_args,
    parse_channel_count,
)
from .publisher import discard, job_workspace, publish, validate_output
from .worker_pool import WorkerPool, PoolStats
from .orchestrator import JobOrchestrator, format_batch_error

__all__ = [
    # Cancellation
    'CancellationToken',
    'JobCancelled',
    # Naming
    'format_ceiling_tag',
    'hidden_temp_path',
    'output_filename',
    'resolve_output_dir',
    'resolve_output_path',
    # Transcoder
    'AudioCodec',
    'FFmpegTranscoder',
    'build_limiter_args',
    'build_probe_args',
    'build_resample_args',
    'parse_channel_count',
    # Publisher
    'discard',
    'job_workspace',
    'publish',
    'validate_output',
    # Worker pool
    'WorkerPool',
    'PoolStats',
    # Orchestrator
    'JobOrchestrator',
    'format_batch_error',
]
