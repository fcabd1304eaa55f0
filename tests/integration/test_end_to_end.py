"""End-to-end batch runs against fake ffmpeg/ffprobe executables."""

import asyncio
import contextlib
import tempfile
from pathlib import Path

import numpy as np
import pytest

from wavshaver.application.batch_processor import CancellationToken, JobOrchestrator
from wavshaver.domain.models import JobInput, JobStatus, SampleRate, Settings
from wavshaver.infrastructure.tools import ToolLocator


@pytest.fixture
def state_dir(tmp_path, monkeypatch):
    state = tmp_path / "state"
    state.mkdir()
    monkeypatch.setenv("FAKE_STATE_DIR", str(state))
    return state


@pytest.fixture
def isolated_tempdir(tmp_path, monkeypatch):
    workspace_root = tmp_path / "system-tmp"
    workspace_root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(workspace_root))
    return workspace_root


@pytest.fixture
def orchestrator(fake_tools, tmp_path):
    locator = ToolLocator(search_dirs=[fake_tools], temp_bin_dir=tmp_path / "tmpbin")
    return JobOrchestrator(locator=locator, home=tmp_path / "home")


def make_sources(write_wav, names, frames=256):
    # FLAC has no float subtype
    return [
        write_wav(name, np.zeros(frames), subtype="PCM_24" if name.endswith(".flac") else "FLOAT")
        for name in names
    ]


@pytest.mark.asyncio
async def test_batch_publishes_outputs_and_cleans_up(
    orchestrator, write_wav, tmp_path, state_dir, isolated_tempdir
):
    sources = make_sources(write_wav, ["a.wav", "b.wav", "c.flac"])
    outdir = tmp_path / "out"
    outdir.mkdir()
    settings = Settings(sample_rate=SampleRate.S48000, ceiling_db=-2.5, output_directory=outdir)

    results = await orchestrator.run([JobInput(input_path=p) for p in sources], settings)

    assert sorted(r.output_path.name for r in results) == [
        "a-48kshaved--2.5dB.wav",
        "b-48kshaved--2.5dB.wav",
        "c-48kshaved--2.5dB.wav",
    ]
    for result in results:
        assert result.output_path.parent == outdir
        assert result.output_path.read_bytes() == result.input_path.read_bytes()
    # No hidden temporaries or workspaces left behind
    assert not [p for p in outdir.iterdir() if p.name.startswith(".")]
    assert list(isolated_tempdir.iterdir()) == []

    limiter_args = (state_dir / "limiter-args").read_text()
    assert "aresample=96000,alimiter=limit=" in limiter_args
    assert ":attack=5:release=50:level=disabled,aresample=48000" in limiter_args
    assert "-ac 2" in limiter_args


@pytest.mark.asyncio
async def test_failing_job_is_omitted(orchestrator, write_wav, tmp_path, isolated_tempdir):
    sources = make_sources(write_wav, ["ok.wav", "broken.wav"])
    inputs = [JobInput(input_path=p, id=p.stem) for p in sources]
    errors = []
    orchestrator.set_on_batch_error(errors.append)

    results = await orchestrator.run(inputs, Settings())

    assert [r.id for r in results] == ["ok"]
    broken = orchestrator.get_job("broken")
    assert broken.status == JobStatus.FAILED
    assert broken.error == "FFmpeg failed (1): Invalid data found when processing input\n"
    assert len(errors) == 1
    assert not (tmp_path / "broken-44kshaved--1dB.wav").exists()
    assert list(isolated_tempdir.iterdir()) == []


@pytest.mark.asyncio
async def test_missing_input_fails_only_that_job(orchestrator, write_wav, tmp_path):
    good, = make_sources(write_wav, ["good.wav"])
    inputs = [JobInput(input_path=good, id="good"), JobInput(input_path=tmp_path / "gone.wav", id="gone")]

    results = await orchestrator.run(inputs, Settings())

    assert [r.id for r in results] == ["good"]
    assert orchestrator.get_job("gone").error.startswith("Invalid input file")


@pytest.mark.asyncio
async def test_missing_tools_fail_every_job(write_wav, tmp_path):
    locator = ToolLocator(search_dirs=[tmp_path / "none"], temp_bin_dir=tmp_path / "tmpbin",
                          which=lambda name: None)
    orchestrator = JobOrchestrator(locator=locator)
    sources = make_sources(write_wav, ["a.wav", "b.wav"])
    errors = []
    orchestrator.set_on_batch_error(errors.append)

    results = await orchestrator.run([JobInput(input_path=p) for p in sources], Settings())

    assert results == []
    assert all(job.status == JobStatus.FAILED for job in orchestrator.jobs)
    assert errors and errors[0].startswith("2 files failed to process.")


@pytest.mark.asyncio
async def test_subprocess_concurrency_bounded(orchestrator, write_wav, state_dir, monkeypatch):
    monkeypatch.setenv("FAKE_DELAY", "0.2")
    sources = make_sources(write_wav, [f"slow{i}.wav" for i in range(7)])

    results = await orchestrator.run([JobInput(input_path=p) for p in sources], Settings())

    assert len(results) == 7
    peaks = [int(line) for line in (state_dir / "peaks").read_text().split()]
    assert max(peaks) <= 3


@pytest.mark.asyncio
async def test_cancel_mid_batch(orchestrator, write_wav, monkeypatch, tmp_path, isolated_tempdir):
    monkeypatch.setenv("FAKE_DELAY", "2")
    sources = make_sources(write_wav, [f"slow{i}.wav" for i in range(6)])
    token = CancellationToken()

    asyncio.get_running_loop().call_later(0.5, token.cancel)
    results = await asyncio.wait_for(
        orchestrator.run([JobInput(input_path=p) for p in sources], Settings(), token),
        timeout=30,
    )

    assert len(results) <= 6
    assert all(job.status.is_terminal for job in orchestrator.jobs)
    assert any(job.status == JobStatus.CANCELLED for job in orchestrator.jobs)
    assert not [p for p in tmp_path.iterdir() if p.name.endswith(".tmp")]
    assert list(isolated_tempdir.iterdir()) == []


@pytest.mark.asyncio
async def test_same_stem_inputs_do_not_share_a_destination(
    orchestrator, write_wav, tmp_path, monkeypatch
):
    monkeypatch.setenv("FAKE_DELAY", "0.3")
    first, second = make_sources(write_wav, ["slow.wav", "slow.flac"])
    inputs = [JobInput(input_path=first, id="a"), JobInput(input_path=second, id="b")]
    errors = []
    orchestrator.set_on_batch_error(errors.append)

    results = await orchestrator.run(inputs, Settings())

    assert [r.id for r in results] == ["a"]
    assert results[0].output_path == tmp_path / "slow-44kshaved--1dB.wav"
    assert results[0].output_path.read_bytes() == first.read_bytes()
    duplicate = orchestrator.get_job("b")
    assert duplicate.status == JobStatus.FAILED
    assert duplicate.error == "Output slow-44kshaved--1dB.wav is already produced by slow.wav"
    assert errors == ["slow.flac: Output slow-44kshaved--1dB.wav is already produced by slow.wav"]
    assert not [p for p in tmp_path.iterdir() if p.name.endswith(".tmp")]


@pytest.mark.asyncio
async def test_destination_never_holds_a_partial_file(orchestrator, write_wav, tmp_path):
    source, = make_sources(write_wav, ["staged.wav"], frames=48000)
    expected = source.read_bytes()
    final = tmp_path / "staged-44kshaved--1dB.wav"
    observed = []
    temp_seen = False

    async def watch():
        nonlocal temp_seen
        while True:
            if any(p.name.startswith(".staged-") for p in tmp_path.iterdir()):
                temp_seen = True
            try:
                observed.append(final.read_bytes())
            except FileNotFoundError:
                observed.append(None)
            await asyncio.sleep(0.005)

    watcher = asyncio.create_task(watch())
    try:
        results = await orchestrator.run([JobInput(input_path=source)], Settings())
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher

    assert [r.output_path for r in results] == [final]
    assert temp_seen
    assert observed
    assert all(data is None or data == expected for data in observed)
    assert final.read_bytes() == expected


@pytest.mark.asyncio
async def test_missing_input_does_not_claim_a_destination(orchestrator, write_wav, tmp_path):
    present, = make_sources(write_wav, ["take.flac"])
    inputs = [
        JobInput(input_path=tmp_path / "take.wav", id="missing"),
        JobInput(input_path=present, id="present"),
    ]

    results = await orchestrator.run(inputs, Settings())

    assert [r.id for r in results] == ["present"]
    assert orchestrator.get_job("missing").error.startswith("Invalid input file")
