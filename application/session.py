"""
Processing Session

Front-end facade over analysis and batch processing. Holds the file list,
the persisted settings and the state a UI or CLI renders: per-file status,
stats, waveforms and a pending alert message.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from ..core.config import SettingsStore, get_settings_store
from ..core.constants import SUPPORTED_EXTENSION_LIST, SUPPORTED_EXTENSIONS
from ..domain.exceptions import AnalysisError
from ..domain.models import FileItem, FileStatus, JobInput, JobResult, Settings
from .analysis import AudioAnalyzer, WaveformGenerator
from .batch_processor import CancellationToken, JobOrchestrator

logger = logging.getLogger(__name__)


def is_supported(path: Union[str, Path]) -> bool:
    """Whether the file extension is accepted (case-insensitive)."""
    return Path(path).suffix.lower().lstrip('.') in SUPPORTED_EXTENSIONS


def skipped_files_message(count: int) -> str:
    plural = "" if count == 1 else "s"
    supported = ", ".join(SUPPORTED_EXTENSION_LIST)
    return f"{count} file{plural} skipped — unsupported format. Supported: {supported}."


class ProcessingSession:
    """
    A list of files with analysis and batch processing.

    Features:
    - Extension filtering with a user-facing alert
    - Concurrent per-file analysis and waveform generation
    - Batch processing with per-file status updates
    - Settings persisted on change
    """

    def __init__(
        self,
        settings_store: Optional[SettingsStore] = None,
        orchestrator: Optional[JobOrchestrator] = None,
        analyzer: Optional[AudioAnalyzer] = None,
        waveform_generator: Optional[WaveformGenerator] = None,
        on_batch_complete: Optional[Callable[[int], None]] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the session.

        Args:
            settings_store: Settings persistence (global store if None)
            orchestrator: Batch orchestrator
            analyzer: Stats analyzer
            waveform_generator: Waveform generator
            on_batch_complete: Called with the completed count after a batch
            settings: Initial settings (loaded from the store if None)
        """
        self.settings_store = settings_store or get_settings_store()
        self.orchestrator = orchestrator or JobOrchestrator()
        self.analyzer = analyzer or AudioAnalyzer()
        self.waveform_generator = waveform_generator or WaveformGenerator()

        self.files: List[FileItem] = []
        self.alert_message: Optional[str] = None
        self.is_processing = False

        self._settings = settings if settings is not None else self.settings_store.load()
        self._token: Optional[CancellationToken] = None
        self._on_batch_complete = on_batch_complete

    def set_on_batch_complete(self, callback: Callable[[int], None]) -> None:
        """Set callback invoked with the completed file count after a batch."""
        self._on_batch_complete = callback

    # Settings

    @property
    def settings(self) -> Settings:
        return self._settings

    @settings.setter
    def settings(self, value: Settings) -> None:
        self._settings = value
        self.settings_store.save(value)

    def update_settings(self, **changes) -> Settings:
        """Apply changes to the settings and persist them."""
        self.settings = self._settings.with_changes(**changes)
        return self._settings

    # File list

    def get_file(self, file_id: str) -> Optional[FileItem]:
        for item in self.files:
            if item.id == file_id:
                return item
        return None

    def add_files(self, paths: Iterable[Union[str, Path]]) -> List[FileItem]:
        """
        Add files with a supported extension.

        Rejected files set :attr:`alert_message`.

        Returns:
            The added items (status PENDING until analyzed).
        """
        paths = [Path(p) for p in paths]
        valid = [p for p in paths if is_supported(p)]
        rejected = len(paths) - len(valid)
        if rejected > 0:
            self.alert_message = skipped_files_message(rejected)
            logger.info(f"Skipped {rejected} unsupported files")

        added = [FileItem(path=p) for p in valid]
        self.files.extend(added)
        return added

    def remove(self, file_ids: Iterable[str]) -> None:
        ids = set(file_ids)
        self.files = [item for item in self.files if item.id not in ids]

    def clear(self) -> None:
        self.files = []

    def dismiss_alert(self) -> None:
        self.alert_message = None

    # Analysis

    async def analyze_pending(self) -> None:
        """Analyze every PENDING file concurrently."""
        pending = [item for item in self.files if item.status == FileStatus.PENDING]
        await asyncio.gather(*(self.analyze_file(item) for item in pending))

    async def analyze_file(self, item: FileItem) -> None:
        """Compute stats and input waveform for one file."""
        item.mark_analyzing()
        stats_result, waveform_result = await asyncio.gather(
            self.analyzer.analyze_async(item.path),
            self.waveform_generator.generate_async(item.path),
            return_exceptions=True,
        )

        if isinstance(stats_result, AnalysisError):
            item.mark_error(str(stats_result))
            logger.warning(f"Analysis failed for {item.path.name}: {stats_result}")
        elif isinstance(stats_result, BaseException):
            raise stats_result
        else:
            item.mark_ready(stats_result)

        if isinstance(waveform_result, asyncio.CancelledError):
            raise waveform_result
        if isinstance(waveform_result, BaseException):
            logger.debug(f"Waveform generation failed for {item.path.name}: {waveform_result}")
        else:
            item.waveform = waveform_result

    # Processing

    async def process(self) -> List[JobResult]:
        """
        Process every file in the list with the current settings.

        Returns:
            Results of the files that completed.
        """
        if not self.files or self.is_processing:
            return []

        self.is_processing = True
        settings = self._settings
        token = CancellationToken()
        self._token = token

        for item in self.files:
            if item.status == FileStatus.READY:
                item.analysis_stats = item.stats

        inputs = [JobInput(input_path=item.path, id=item.id) for item in self.files]

        self.orchestrator.set_on_job_started(self._on_job_started)
        self.orchestrator.set_on_job_failed(self._on_job_failed)
        self.orchestrator.set_on_batch_error(self._on_batch_error)

        try:
            results = await self.orchestrator.run(inputs, settings, token)
        finally:
            self.is_processing = False
            self._token = None

        for result in results:
            item = self.get_file(result.id)
            if item is not None:
                item.mark_processed(result.output_path)

        if token.is_cancelled:
            self._restore_interrupted()
        else:
            await self._generate_output_waveforms(results)
            if self._on_batch_complete:
                self._on_batch_complete(len(results))

        return results

    def cancel(self) -> None:
        """Cancel the running batch."""
        if self._token is not None:
            self._token.cancel()

    def _on_job_started(self, job_id: str) -> None:
        item = self.get_file(job_id)
        if item is not None:
            item.mark_processing()

    def _on_job_failed(self, job_id: str, error: Exception) -> None:
        item = self.get_file(job_id)
        if item is not None:
            item.mark_error(str(error))

    def _on_batch_error(self, message: str) -> None:
        self.alert_message = message

    def _restore_interrupted(self) -> None:
        for item in self.files:
            if item.status != FileStatus.PROCESSING:
                continue
            if item.analysis_stats is not None:
                item.mark_ready(item.analysis_stats)
            else:
                item.status = FileStatus.PENDING

    async def _generate_output_waveforms(self, results: List[JobResult]) -> None:
        async def generate(result: JobResult) -> None:
            item = self.get_file(result.id)
            if item is None:
                return
            try:
                waveform = await self.waveform_generator.generate_async(result.output_path)
            except AnalysisError as e:
                logger.warning(f"Output waveform failed for {result.output_path.name}: {e}")
                return
            item.output_waveform = waveform
            logger.debug(
                f"Output waveform for {result.output_path.name}: "
                f"{waveform.bucket_count} peaks, {waveform.channel_count} ch"
            )

        await asyncio.gather(*(generate(result) for result in results))
