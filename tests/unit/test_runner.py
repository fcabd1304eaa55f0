"""Tests for subprocess execution."""

import asyncio
import os

import pytest

from wavshaver.domain.exceptions import LaunchFailedError, ToolFailedError, ToolNotFoundError
from wavshaver.infrastructure.process import ProcessRunner


@pytest.mark.asyncio
async def test_capture_returns_stdout(make_script):
    script = make_script("echo_args", """
        import sys
        print(" ".join(sys.argv[1:]))
    """)

    output = await ProcessRunner().capture(script, ["-v", "error", "x.wav"])

    assert output.strip() == "-v error x.wav"


@pytest.mark.asyncio
async def test_large_output_on_both_streams_does_not_deadlock(make_script):
    script = make_script("chatty", """
        import sys
        block = "x" * 1024
        for _ in range(1024):
            sys.stdout.write(block)
            sys.stderr.write(block)
        sys.stdout.flush()
        sys.stderr.flush()
    """)

    output = await asyncio.wait_for(ProcessRunner().capture(script, []), timeout=30)

    assert len(output) == 1024 * 1024


@pytest.mark.asyncio
async def test_non_zero_exit_carries_stderr(make_script):
    script = make_script("fails", """
        import sys
        sys.stderr.write("Invalid data found when processing input")
        sys.exit(3)
    """)

    with pytest.raises(ToolFailedError) as excinfo:
        await ProcessRunner().run(script, [])

    assert excinfo.value.exit_code == 3
    assert excinfo.value.message == "Invalid data found when processing input"
    assert str(excinfo.value) == "FFmpeg failed (3): Invalid data found when processing input"


@pytest.mark.asyncio
async def test_non_zero_exit_without_stderr(make_script):
    script = make_script("silent_fail", """
        import sys
        sys.exit(7)
    """)

    with pytest.raises(ToolFailedError) as excinfo:
        await ProcessRunner().run(script, [])

    assert excinfo.value.message == "Exit code 7"


@pytest.mark.asyncio
async def test_missing_executable(tmp_path):
    with pytest.raises(ToolNotFoundError):
        await ProcessRunner().run(tmp_path / "nope", [])


@pytest.mark.asyncio
async def test_launch_failure(tmp_path):
    not_executable = tmp_path / "plain.txt"
    not_executable.write_text("just text")

    with pytest.raises(LaunchFailedError):
        await ProcessRunner().run(not_executable, [])


@pytest.mark.asyncio
async def test_cancellation_kills_child(make_script, tmp_path):
    pid_file = tmp_path / "pid"
    script = make_script("sleeper", f"""
        import os
        import time
        with open({str(pid_file)!r}, "w") as f:
            f.write(str(os.getpid()))
        time.sleep(60)
    """)

    task = asyncio.create_task(ProcessRunner().run(script, []))
    for _ in range(200):
        if pid_file.exists() and pid_file.read_text():
            break
        await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    pid = int(pid_file.read_text())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)
