"""
WavShaver - Application Entry Point

Command line front end: analyze audio files and transcode them to
44.1/48 kHz 24-bit WAV with a true-peak ceiling.

Usage:
    python -m wavshaver [options] FILES...

Or via the installed command:
    wavshaver [options] FILES...
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import List, Optional


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="wavshaver",
        description="Resample audio files to 24-bit WAV and limit their true peak",
    )

    parser.add_argument(
        "--version", "-V",
        action="store_true",
        help="Show version information"
    )

    parser.add_argument(
        "--analyze",
        action="store_true",
        help="Only show levels and waveform summary, do not process"
    )

    parser.add_argument(
        "--rate",
        type=int,
        choices=[44100, 48000],
        help="Output sample rate"
    )

    parser.add_argument(
        "--ceiling",
        type=float,
        metavar="DB",
        help="Limiter ceiling in dBFS (-6 to -1)"
    )

    parser.add_argument(
        "--output-dir",
        metavar="DIR",
        help="Write outputs to this directory"
    )

    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Remember the given options for later runs"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILES",
        help="Audio files to process"
    )

    return parser.parse_args(argv)


def _format_stats(stats) -> str:
    return f"RMS {stats.rms:7.2f} dB | Peak {stats.peak:7.2f} dB | Crest {stats.crest:6.2f} dB"


def _print_file_table(session) -> bool:
    """Print per-file analysis. Returns False if any file failed."""
    ok = True
    for item in session.files:
        if item.error:
            ok = False
            print(f"  {item.path.name}: ERROR {item.error}")
            continue
        line = f"  {item.path.name}: {_format_stats(item.current_stats)}"
        if item.waveform is not None:
            line += f" | {item.waveform.bucket_count} pts, {item.waveform.channel_count} ch"
        print(line)
    return ok


def _install_interrupt_handler(loop: asyncio.AbstractEventLoop, session) -> None:
    try:
        loop.add_signal_handler(signal.SIGINT, session.cancel)
    except (NotImplementedError, RuntimeError):
        # Windows event loops have no signal handler support
        signal.signal(signal.SIGINT, lambda signum, frame: session.cancel())


async def _run(args: argparse.Namespace) -> int:
    from wavshaver.application.session import ProcessingSession
    from wavshaver.core.config import get_settings_store
    from wavshaver.domain.models import FileStatus

    store = get_settings_store()
    settings = store.load()

    changes = {}
    if args.rate is not None:
        changes["sample_rate"] = args.rate
    if args.ceiling is not None:
        changes["ceiling_db"] = args.ceiling
    if args.output_dir is not None:
        changes["output_directory"] = Path(args.output_dir).expanduser()
    try:
        settings = settings.with_changes(**changes)
    except ValueError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 1

    if args.save_settings:
        store.save(settings)

    session = ProcessingSession(settings_store=store, settings=settings)
    session.add_files(args.files)
    if session.alert_message:
        print(session.alert_message, file=sys.stderr)
        session.dismiss_alert()

    if not session.files:
        print("No supported audio files given.", file=sys.stderr)
        return 1

    print(f"Analyzing {len(session.files)} file(s)...")
    await session.analyze_pending()
    analysis_ok = _print_file_table(session)

    if args.analyze:
        return 0 if analysis_ok else 1

    print(
        f"Processing @ {int(settings.sample_rate)} Hz, ceiling {settings.ceiling_db} dB "
        "(Ctrl-C to cancel)..."
    )
    _install_interrupt_handler(asyncio.get_running_loop(), session)

    results = await session.process()

    for item in session.files:
        if item.status == FileStatus.PROCESSED:
            print(f"  {item.path.name} -> {item.output_path}")
        elif item.status == FileStatus.ERROR:
            print(f"  {item.path.name}: FAILED {item.error}")
    if session.alert_message:
        print(session.alert_message, file=sys.stderr)

    print(f"Done: {len(results)} of {len(session.files)} file(s) processed.")
    return 0 if len(results) == len(session.files) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for WavShaver.

    Returns:
        int: Exit code (0 for success, non-zero for errors).
    """
    args = parse_args(argv)

    if args.version:
        from wavshaver import __version__
        print(f"WavShaver v{__version__}")
        return 0

    # Step 1: Bootstrap the runtime environment
    try:
        from wavshaver.runtime.bootstrap import bootstrap, BootstrapError
        bootstrap(verbose=args.verbose)
    except BootstrapError as e:
        print(f"Failed to initialize runtime: {e}", file=sys.stderr)
        return 1

    # Step 2: Run the batch
    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
