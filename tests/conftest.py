"""Shared fixtures: synthetic audio files and fake ffmpeg/ffprobe executables."""

from __future__ import annotations

import os
import stat
import sys
import textwrap
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf


@pytest.fixture
def write_wav(tmp_path):
    """Write an audio file from an array of shape (frames,) or (frames, channels)."""

    def _write(name: str, data: np.ndarray, sample_rate: int = 48000,
               subtype: str = "FLOAT") -> Path:
        path = tmp_path / name
        sf.write(str(path), np.asarray(data, dtype=np.float32), sample_rate, subtype=subtype)
        return path

    return _write


@pytest.fixture
def sine():
    """Full-scale sine wave generator."""

    def _sine(freq: float = 1000.0, seconds: float = 1.0, sample_rate: int = 48000,
              amplitude: float = 1.0, channels: int = 1) -> np.ndarray:
        t = np.arange(int(seconds * sample_rate)) / sample_rate
        wave = amplitude * np.sin(2 * np.pi * freq * t)
        if channels == 1:
            return wave
        return np.column_stack([wave] * channels)

    return _sine


def write_script(path: Path, body: str) -> Path:
    """Write an executable Python script run by the current interpreter."""
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
    os.chmod(path, path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


FAKE_FFPROBE = """
import os
import sys

print(os.environ.get("FAKE_CHANNELS", "2"))
"""

# Copies the input to the last argument; fails for inputs containing "broken";
# sleeps for inputs containing "slow"; writes the limiter output in timed
# pieces for inputs containing "staged"; records the peak number of
# concurrently running processes when FAKE_STATE_DIR is set.
FAKE_FFMPEG = """
import os
import shutil
import sys
import time

args = sys.argv[1:]
src = args[args.index("-i") + 1]
dst = args[-1]
state = os.environ.get("FAKE_STATE_DIR")

if "broken" in os.path.basename(src):
    sys.stderr.write("Invalid data found when processing input\\n")
    sys.exit(1)

marker = None
if state:
    marker = os.path.join(state, "running-%d" % os.getpid())
    open(marker, "w").close()
    running = len([n for n in os.listdir(state) if n.startswith("running-")])
    with open(os.path.join(state, "peaks"), "a") as f:
        f.write("%d\\n" % running)

try:
    if "slow" in os.path.basename(src):
        time.sleep(float(os.environ.get("FAKE_DELAY", "0.3")))
    if state and "-f" in args:
        with open(os.path.join(state, "limiter-args"), "w") as f:
            f.write(" ".join(args))
    if "staged" in os.path.basename(src) and "-f" in args:
        with open(src, "rb") as f:
            data = f.read()
        step = max(1, len(data) // 8)
        with open(dst, "wb") as out:
            for start in range(0, len(data), step):
                out.write(data[start:start + step])
                out.flush()
                time.sleep(0.05)
    else:
        shutil.copyfile(src, dst)
finally:
    if marker:
        os.remove(marker)
"""


@pytest.fixture
def fake_tools(tmp_path):
    """Directory holding fake ``ffmpeg`` and ``ffprobe`` scripts."""
    if sys.platform == "win32":
        pytest.skip("fake tools are POSIX shebang scripts")
    bin_dir = tmp_path / "bundle" / "bin"
    bin_dir.mkdir(parents=True)
    write_script(bin_dir / "ffprobe", FAKE_FFPROBE)
    write_script(bin_dir / "ffmpeg", FAKE_FFMPEG)
    return bin_dir


@pytest.fixture
def make_script(tmp_path):
    """Factory writing executable Python scripts into ``tmp_path``."""
    if sys.platform == "win32":
        pytest.skip("scripts rely on POSIX shebang lines")

    def _make(name: str, body: str) -> Path:
        return write_script(tmp_path / name, body)

    return _make
