"""
FFmpeg Transcoder

Two-stage ffmpeg pipeline:
1. resample to the target rate as 24-bit PCM WAV (intermediate)
2. oversampled true-peak limiting, back to the target rate (final)
"""

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ...core.constants import DEFAULT_CHANNELS
from ...domain.models import SampleRate
from ...infrastructure.process import ProcessRunner
from ...infrastructure.tools import ToolPaths

logger = logging.getLogger(__name__)

# Limiter envelope (ms)
LIMITER_ATTACK_MS = 5
LIMITER_RELEASE_MS = 50


class AudioCodec(Enum):
    """Audio codecs for encoding."""
    PCM_S24LE = "pcm_s24le"  # WAV 24-bit


def _base_args(input_path: Path) -> List[str]:
    return [
        '-nostdin',
        '-hide_banner',
        '-loglevel', 'error',
        '-y',
        '-i', str(input_path),
    ]


def build_probe_args(input_path: Path) -> List[str]:
    """ffprobe arguments printing the first audio stream's channel count."""
    return [
        '-v', 'error',
        '-select_streams', 'a:0',
        '-show_entries', 'stream=channels',
        '-of', 'csv=p=0',
        str(input_path),
    ]


def build_resample_args(
    input_path: Path,
    output_path: Path,
    sample_rate: int,
    channels: int,
) -> List[str]:
    """ffmpeg arguments for the resample stage."""
    args = _base_args(input_path)
    args.extend(['-af', f'aresample={int(sample_rate)}'])
    args.extend(['-c:a', AudioCodec.PCM_S24LE.value])
    args.extend(['-ar', str(int(sample_rate))])
    args.extend(['-ac', str(channels)])
    args.append(str(output_path))
    return args


def build_limiter_filter(sample_rate: int, ceiling_amplitude: float) -> str:
    """Filter chain: 2x oversample, limit, return to the target rate."""
    return ','.join([
        f'aresample={int(sample_rate) * 2}',
        f'alimiter=limit={ceiling_amplitude}:attack={LIMITER_ATTACK_MS}'
        f':release={LIMITER_RELEASE_MS}:level=disabled',
        f'aresample={int(sample_rate)}',
    ])


def build_limiter_args(
    input_path: Path,
    output_path: Path,
    sample_rate: int,
    channels: int,
    ceiling_amplitude: float,
) -> List[str]:
    """
    ffmpeg arguments for the limiter stage.

    The output container is forced to WAV because the destination is a
    hidden ``.tmp`` file whose extension ffmpeg cannot infer a muxer from.
    """
    args = _base_args(input_path)
    args.extend(['-af', build_limiter_filter(sample_rate, ceiling_amplitude)])
    args.extend(['-c:a', AudioCodec.PCM_S24LE.value])
    args.extend(['-ar', str(int(sample_rate))])
    args.extend(['-ac', str(channels)])
    args.extend(['-f', 'wav'])
    args.append(str(output_path))
    return args


def parse_channel_count(output: str) -> int:
    """Parse ffprobe's channel output, falling back to stereo."""
    lines = output.strip().splitlines()
    if not lines:
        return DEFAULT_CHANNELS
    try:
        channels = int(lines[0].strip().rstrip(','))
    except ValueError:
        logger.warning(f"Unexpected channel probe output: {output!r}")
        return DEFAULT_CHANNELS
    return channels if channels > 0 else DEFAULT_CHANNELS


class FFmpegTranscoder:
    """
    Runs the probe, resample and limiter stages for one job.

    Features:
    - Channel layout preserved from the source
    - 24-bit PCM at 44.1 kHz or 48 kHz
    - Limiter ceiling applied at twice the target rate
    """

    def __init__(self, tools: ToolPaths, runner: Optional[ProcessRunner] = None):
        """
        Initialize the transcoder.

        Args:
            tools: Resolved ffmpeg/ffprobe paths
            runner: Process runner (a new one if None)
        """
        self.tools = tools
        self.runner = runner or ProcessRunner()

    async def probe_channels(self, input_path: Path) -> int:
        """Channel count of the first audio stream (2 when unknown)."""
        output = await self.runner.capture(self.tools.probe_path, build_probe_args(input_path))
        return parse_channel_count(output)

    async def resample(
        self,
        input_path: Path,
        output_path: Path,
        sample_rate: SampleRate,
        channels: int,
    ) -> None:
        logger.debug(f"Resampling {input_path.name} -> {output_path.name} @ {int(sample_rate)} Hz")
        await self.runner.run(
            self.tools.transcoder_path,
            build_resample_args(input_path, output_path, sample_rate, channels),
        )

    async def limit(
        self,
        input_path: Path,
        output_path: Path,
        sample_rate: SampleRate,
        channels: int,
        ceiling_amplitude: float,
    ) -> None:
        logger.debug(f"Limiting {input_path.name} -> {output_path.name} (limit={ceiling_amplitude})")
        await self.runner.run(
            self.tools.transcoder_path,
            build_limiter_args(input_path, output_path, sample_rate, channels, ceiling_amplitude),
        )
