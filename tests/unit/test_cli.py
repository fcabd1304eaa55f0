"""Tests for the command line front end."""

import importlib

import numpy as np
import pytest

from wavshaver.__main__ import main, parse_args
from wavshaver.core.config import SettingsStore
from wavshaver.domain.models import Settings


@pytest.fixture
def store(tmp_path, mocker):
    store = SettingsStore(config_dir=tmp_path / "config")
    mocker.patch("wavshaver.core.config.get_settings_store", return_value=store)
    mocker.patch.object(importlib.import_module("wavshaver.runtime.bootstrap"), "bootstrap")
    return store


def test_parse_args():
    args = parse_args(["--rate", "48000", "--ceiling", "-2.5", "a.wav", "b.wav"])
    assert args.rate == 48000
    assert args.ceiling == -2.5
    assert args.files == ["a.wav", "b.wav"]
    assert not args.analyze


def test_rejects_unknown_rate():
    with pytest.raises(SystemExit):
        parse_args(["--rate", "96000"])


def test_version(capsys):
    assert main(["--version"]) == 0
    assert "WavShaver v" in capsys.readouterr().out


def test_no_supported_files(store, capsys):
    assert main(["notes.txt"]) == 1
    err = capsys.readouterr().err
    assert "1 file skipped" in err
    assert "No supported audio files" in err


def test_invalid_ceiling(store, capsys):
    assert main(["--ceiling", "0", "a.wav"]) == 1
    assert "Invalid settings" in capsys.readouterr().err


def test_analyze_only(store, write_wav, sine, capsys):
    path = write_wav("tone.wav", sine(1000.0, seconds=0.2))

    assert main(["--analyze", str(path)]) == 0

    out = capsys.readouterr().out
    assert "tone.wav" in out
    assert "Crest" in out


def test_save_settings(store, capsys):
    main(["--rate", "48000", "--ceiling", "-3", "--save-settings", "--analyze", "missing.wav"])

    assert store.load() == Settings(sample_rate=48000, ceiling_db=-3)


def test_process_reports_failures(store, write_wav, mocker, capsys):
    path = write_wav("a.wav", np.zeros(100))
    run = mocker.patch(
        "wavshaver.application.batch_processor.JobOrchestrator.run",
        new=mocker.AsyncMock(return_value=[]),
    )
    mocker.patch("wavshaver.application.batch_processor.orchestrator.get_tool_locator")

    assert main([str(path)]) == 1
    run.assert_awaited_once()
    assert "Done: 0 of 1" in capsys.readouterr().out
