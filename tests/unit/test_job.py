"""Tests for the job state machine."""

import pytest

from wavshaver.domain.exceptions import InvalidTransitionError
from wavshaver.domain.models import Job, JobInput, JobStatus


def make_job():
    return Job.from_input(JobInput(input_path="/tmp/a.wav", id="job-1"))


def test_happy_path_sets_timestamps(tmp_path):
    job = make_job()
    job.output_path = tmp_path / "a-44kshaved--1dB.wav"

    job.transition(JobStatus.STARTED)
    assert job.started_at is not None
    job.transition(JobStatus.PUBLISHING)
    job.transition(JobStatus.COMPLETED)

    assert job.status.is_terminal
    assert job.duration is not None
    result = job.to_result()
    assert result.id == "job-1"
    assert result.output_path == job.output_path


def test_pending_can_be_cancelled():
    job = make_job()
    job.transition(JobStatus.CANCELLED)
    assert job.status == JobStatus.CANCELLED


def test_failure_records_error():
    job = make_job()
    job.transition(JobStatus.STARTED)
    job.transition(JobStatus.FAILED, "FFmpeg failed (1): boom")
    assert job.error == "FFmpeg failed (1): boom"
    assert job.to_dict()["status"] == "failed"


@pytest.mark.parametrize(
    "path",
    [
        [JobStatus.PUBLISHING],
        [JobStatus.COMPLETED],
        [JobStatus.STARTED, JobStatus.COMPLETED],
        [JobStatus.STARTED, JobStatus.STARTED],
        [JobStatus.CANCELLED, JobStatus.STARTED],
        [JobStatus.STARTED, JobStatus.FAILED, JobStatus.COMPLETED],
        [JobStatus.STARTED, JobStatus.PUBLISHING, JobStatus.COMPLETED, JobStatus.FAILED],
    ],
)
def test_illegal_transitions_raise(path):
    job = make_job()
    *legal, illegal = path
    for status in legal:
        job.transition(status)
    with pytest.raises(InvalidTransitionError):
        job.transition(illegal)


def test_result_requires_completion():
    with pytest.raises(InvalidTransitionError):
        make_job().to_result()


def test_job_input_generates_ids():
    a = JobInput(input_path="x.wav")
    b = JobInput(input_path="x.wav")
    assert a.id != b.id
