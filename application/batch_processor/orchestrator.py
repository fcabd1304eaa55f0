"""
Job Orchestrator

Runs a batch of transcode jobs with bounded concurrency.

Each job runs the full pipeline for one file: resolve tools, probe the
channel layout, resample into a private workspace, limit into a hidden
temporary file beside the destination, then publish it atomically.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from ...core.constants import MAX_CONCURRENT_JOBS
from ...domain.exceptions import InvalidInputError, OutputConflictError, ProcessingError
from ...domain.models import Job, JobInput, JobResult, JobStatus, Settings
from ...infrastructure.process import ProcessRunner
from ...infrastructure.tools import ToolLocator, get_tool_locator
from .cancellation import CancellationToken, JobCancelled
from .naming import hidden_temp_path, resolve_output_path
from .publisher import discard, job_workspace, publish, validate_output
from .transcoder import FFmpegTranscoder
from .worker_pool import WorkerPool

logger = logging.getLogger(__name__)


def format_batch_error(failures: Sequence[Job]) -> str:
    """User-facing summary of a batch's failures."""
    first = failures[0]
    message = f"{first.input_path.name}: {first.error}"
    if len(failures) > 1:
        return f"{len(failures)} files failed to process. {message}"
    return message


class JobOrchestrator:
    """
    Batch transcode orchestrator.

    Features:
    - At most ``max_concurrent`` jobs in flight, sliding-window admission
    - Per-job failure isolation
    - Cooperative cancellation returning partial results
    - Started / failed / batch-error callbacks
    """

    def __init__(
        self,
        locator: Optional[ToolLocator] = None,
        runner: Optional[ProcessRunner] = None,
        max_concurrent: int = MAX_CONCURRENT_JOBS,
        home: Optional[Path] = None,
        on_job_started: Optional[Callable[[str], None]] = None,
        on_job_failed: Optional[Callable[[str, Exception], None]] = None,
        on_batch_error: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            locator: Tool locator (process-wide locator if None)
            runner: Process runner shared by all jobs
            max_concurrent: Maximum number of jobs in flight
            home: Home directory used for fallback output locations
            on_job_started: Called with the job id when a worker claims it
            on_job_failed: Called with the job id and the error
            on_batch_error: Called once per batch with a failure summary
        """
        self.locator = locator or get_tool_locator()
        self.runner = runner or ProcessRunner()
        self.max_concurrent = max_concurrent
        self.home = home

        self._on_job_started = on_job_started
        self._on_job_failed = on_job_failed
        self._on_batch_error = on_batch_error

        self._jobs: Dict[str, Job] = {}
        self._token: Optional[CancellationToken] = None
        self._claimed_by: Dict[str, Job] = {}

    # Callbacks

    def set_on_job_started(self, callback: Callable[[str], None]) -> None:
        """Set callback for job start."""
        self._on_job_started = callback

    def set_on_job_failed(self, callback: Callable[[str, Exception], None]) -> None:
        """Set callback for job failure."""
        self._on_job_failed = callback

    def set_on_batch_error(self, callback: Callable[[str], None]) -> None:
        """Set callback for the end-of-batch failure summary."""
        self._on_batch_error = callback

    # State

    @property
    def jobs(self) -> List[Job]:
        """Jobs of the current (or last) batch, in submission order."""
        return list(self._jobs.values())

    def get_job(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def cancel(self) -> None:
        """Cancel the running batch, if any."""
        if self._token is not None:
            self._token.cancel()

    # Batch

    async def run(
        self,
        inputs: Sequence[JobInput],
        settings: Settings,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[JobResult]:
        """
        Process a batch of files.

        Args:
            inputs: Files to process, each with a caller-assigned id
            settings: Settings snapshot applied to every job
            cancel_token: Batch cancellation token

        Returns:
            Results of the jobs that completed, in completion order.

        Raises:
            ValueError: If two inputs share an id
            asyncio.CancelledError: If the awaiting task itself is cancelled
        """
        ids = [job_input.id for job_input in inputs]
        if len(set(ids)) != len(ids):
            raise ValueError("Job ids must be unique within a batch")

        self._jobs = {job_input.id: Job.from_input(job_input) for job_input in inputs}
        if not self._jobs:
            return []

        self._claimed_by = await asyncio.to_thread(self._plan_outputs, settings)

        token = cancel_token or CancellationToken()
        self._token = token
        results: List[JobResult] = []
        failures: List[Job] = []

        pool: WorkerPool[Job] = WorkerPool(max_workers=self.max_concurrent, name="JobWorkerPool")
        loop = asyncio.get_running_loop()
        unregister = token.add_callback(lambda: loop.call_soon_threadsafe(pool.cancel))

        async def handle(job: Job) -> None:
            result = await self._run_job(job, settings, token, failures)
            if result is not None:
                results.append(result)

        logger.info(
            f"Processing {len(self._jobs)} files @ {int(settings.sample_rate)} Hz, "
            f"ceiling {settings.ceiling_db} dB"
        )
        try:
            await pool.run(handle, self.jobs, should_stop=lambda: token.is_cancelled)
        finally:
            unregister()
            for job in self._jobs.values():
                if job.status == JobStatus.PENDING:
                    job.transition(JobStatus.CANCELLED)

        if token.is_cancelled:
            logger.info(f"Batch cancelled: {len(results)} of {len(self._jobs)} files completed")
        else:
            logger.info(f"Batch finished: {len(results)} of {len(self._jobs)} files completed")

        if failures:
            self._notify_batch_error(format_batch_error(failures))

        return results

    async def _run_job(
        self,
        job: Job,
        settings: Settings,
        token: CancellationToken,
        failures: List[Job],
    ) -> Optional[JobResult]:
        if token.is_cancelled:
            job.transition(JobStatus.CANCELLED)
            return None

        job.transition(JobStatus.STARTED)
        self._notify_started(job)

        try:
            await self._process_job(job, settings, token)
        except JobCancelled:
            self._settle(job, JobStatus.CANCELLED)
            logger.info(f"Cancelled {job.input_path.name}")
            return None
        except asyncio.CancelledError:
            self._settle(job, JobStatus.CANCELLED)
            logger.info(f"Cancelled {job.input_path.name}")
            raise
        except (ProcessingError, OSError) as e:
            self._fail(job, e, failures)
            return None
        except Exception as e:
            logger.exception(f"Unexpected error processing {job.input_path.name}")
            self._fail(job, e, failures)
            return None

        job.transition(JobStatus.COMPLETED)
        logger.info(f"Completed {job.input_path.name} -> {job.output_path}")
        return job.to_result()

    def _plan_outputs(self, settings: Settings) -> Dict[str, Job]:
        """
        Resolve every job's destination before any job is admitted.

        The first existing input claiming a destination owns it; later jobs
        resolving to the same file are mapped to that owner and fail when
        they start.

        Returns:
            Mapping of conflicting job id to the job owning its destination.
        """
        owners: Dict[str, Job] = {}
        claimed_by: Dict[str, Job] = {}
        for job in self._jobs.values():
            job.output_path = resolve_output_path(job.input_path, settings, self.home)
            if not job.input_path.is_file():
                continue
            key = os.path.normcase(os.path.abspath(job.output_path))
            owner = owners.setdefault(key, job)
            if owner is not job:
                claimed_by[job.id] = owner
                logger.warning(
                    f"{job.input_path.name} and {owner.input_path.name} "
                    f"both resolve to {job.output_path.name}"
                )
        return claimed_by

    async def _process_job(self, job: Job, settings: Settings, token: CancellationToken) -> None:
        owner = self._claimed_by.get(job.id)
        if owner is not None:
            raise OutputConflictError(
                f"Output {job.output_path.name} is already produced by {owner.input_path.name}"
            )

        tools = await self.locator.ensure_tools_async()

        input_path = job.input_path
        if not input_path.is_file():
            raise InvalidInputError(f"Invalid input file: {input_path}")

        final_path = job.output_path
        if final_path is None:
            final_path = await asyncio.to_thread(resolve_output_path, input_path, settings, self.home)
            job.output_path = final_path
        temp_path = hidden_temp_path(final_path, job.id)

        transcoder = FFmpegTranscoder(tools, self.runner)
        rate = settings.sample_rate

        with job_workspace(prefix=f"wavshaver_{rate.tag}_") as workspace:
            channels = await transcoder.probe_channels(input_path)
            intermediate = workspace / f"{input_path.stem}_{rate.tag}24.wav"
            await transcoder.resample(input_path, intermediate, rate, channels)

            token.raise_if_cancelled()

            discard(temp_path)
            try:
                await transcoder.limit(
                    intermediate, temp_path, rate, channels, settings.ceiling_amplitude
                )
                job.transition(JobStatus.PUBLISHING)
                validate_output(temp_path)
                publish(temp_path, final_path)
            except BaseException:
                discard(temp_path)
                raise

    def _settle(self, job: Job, status: JobStatus, error: Optional[str] = None) -> None:
        if job.can_transition(status):
            job.transition(status, error)

    def _fail(self, job: Job, error: Exception, failures: List[Job]) -> None:
        self._settle(job, JobStatus.FAILED, str(error))
        failures.append(job)
        logger.error(f"Failed to process {job.input_path.name}: {error}")
        if self._on_job_failed:
            self._on_job_failed(job.id, error)

    def _notify_started(self, job: Job) -> None:
        logger.debug(f"Started {job.input_path.name} ({job.id})")
        if self._on_job_started:
            self._on_job_started(job.id)

    def _notify_batch_error(self, message: str) -> None:
        if self._on_batch_error:
            self._on_batch_error(message)
