"""Amazon Transcribe job orchestration.

WHY: Transcribe jobs are asynchronous. Starting one returns at once and
the result appears in S3 minutes later. The pipeline needs exactly one
job per file fingerprint, started only if absent, and a way to wait for
it that can be interrupted without being mistaken for a failed job.

HOW: get_job() maps GetTranscriptionJob to a TranscriptionJob snapshot
(or None when the service says the job does not exist). ensure_job()
starts a job only when get_job() returns None. wait_for_completion() is a
coroutine polling on a fixed interval; boto3 calls run in a worker
thread so the event loop stays responsive to cancellation.

RULES:
- Job states: QUEUED → IN_PROGRESS → COMPLETED | FAILED
- An existing job is never restarted by ensure_job()
- Diarization settings are sent only when diarization is enabled
- wait_for_completion() never raises for FAILED, timeout or cancellation;
  it returns a JobResult whose outcome says which one happened
- Errors from the service other than "not found" propagate
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from botocore.exceptions import ClientError

from transcribe_meetings.aws.s3 import is_not_found_error

if TYPE_CHECKING:
    from transcribe_meetings.config import AppConfig

logger = logging.getLogger(__name__)

_JOB_NOT_FOUND_MESSAGE = "couldn't be found"


class JobStatus(str, enum.Enum):
    """TranscriptionJobStatus values reported by Transcribe."""

    QUEUED = "QUEUED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobOutcome(str, enum.Enum):
    """How waiting for a job ended."""

    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TranscriptionJob:
    """Snapshot of a job as returned by GetTranscriptionJob."""

    name: str
    status: JobStatus
    failure_reason: str | None = None

    @classmethod
    def from_response(cls, data: dict) -> TranscriptionJob:
        job = data["TranscriptionJob"]
        return cls(
            name=job["TranscriptionJobName"],
            status=JobStatus(job["TranscriptionJobStatus"]),
            failure_reason=job.get("FailureReason"),
        )


@dataclass(frozen=True)
class JobResult:
    """Result of wait_for_completion().

    RULES:
    - reason is the service's FailureReason for FAILED, a human-readable
      cause for CANCELLED, None for COMPLETED
    """

    job_name: str
    outcome: JobOutcome
    reason: str | None = None


def is_job_not_found_error(err: Exception) -> bool:
    """Return True if ``err`` means the transcription job does not exist.

    Transcribe answers GetTranscriptionJob for an unknown name with a
    BadRequestException whose message says the job couldn't be found.
    """
    if is_not_found_error(err):
        return True
    if not isinstance(err, ClientError):
        return False
    error = err.response.get("Error", {})
    return error.get("Code") == "BadRequestException" and _JOB_NOT_FOUND_MESSAGE in error.get(
        "Message", ""
    )


class TranscribeService:
    """Job operations on a boto3 Transcribe client."""

    def __init__(self, client) -> None:  # noqa: ANN001
        self._client = client

    def get_job(self, job_name: str) -> TranscriptionJob | None:
        """Return the job named ``job_name``, or None if it does not exist."""
        try:
            resp = self._client.get_transcription_job(TranscriptionJobName=job_name)
        except ClientError as e:
            if is_job_not_found_error(e):
                return None
            raise
        return TranscriptionJob.from_response(resp)

    def start_job(
        self,
        job_name: str,
        bucket: str,
        media_key: str,
        config: AppConfig,
    ) -> None:
        """Start a transcription job for ``s3://bucket/media_key``.

        The result document is written to ``bucket`` as ``<job_name>.json``.
        """
        params = {
            "TranscriptionJobName": job_name,
            "LanguageCode": config.language_code,
            "MediaFormat": config.media_format,
            "Media": {"MediaFileUri": "s3://{}/{}".format(bucket, media_key)},
            "OutputBucketName": bucket,
        }
        if config.diarization:
            params["Settings"] = {
                "ShowSpeakerLabels": True,
                "MaxSpeakerLabels": config.max_speakers,
            }
        logger.debug("StartTranscriptionJob %s", params)
        self._client.start_transcription_job(**params)

    def ensure_job(
        self,
        job_name: str,
        bucket: str,
        media_key: str,
        config: AppConfig,
        on_status: Callable[[str], None] | None = None,
    ) -> bool:
        """Start the job unless one with ``job_name`` already exists.

        Returns:
            True if a job was started, False if one already existed.
        """
        existing = self.get_job(job_name)
        if existing is not None:
            logger.info("Transcription job %s already exists (%s)", job_name, existing.status.value)
            if on_status:
                on_status(
                    "Transcription job {} already exists with status: {}".format(
                        job_name, existing.status.value
                    )
                )
            return False

        if on_status:
            on_status("Starting transcription job {}...".format(job_name))
        self.start_job(job_name, bucket, media_key, config)
        logger.info("Started transcription job %s", job_name)
        return True

    async def wait_for_completion(
        self,
        job_name: str,
        poll_interval_s: float,
        timeout_s: float | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> JobResult:
        """Poll ``job_name`` until it reaches a terminal state.

        Args:
            job_name: The job to watch.
            poll_interval_s: Fixed delay between status checks.
            timeout_s: Deadline for the whole wait; None waits forever.
            on_status: Optional callback for status updates.

        Returns:
            JobResult with outcome COMPLETED, FAILED, or CANCELLED (deadline
            reached or the awaiting task was cancelled).
        """
        if on_status:
            on_status("Waiting for transcription job to complete...")
        try:
            return await asyncio.wait_for(
                self._poll(job_name, poll_interval_s, on_status),
                timeout=timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning("Gave up waiting for %s after %ss", job_name, timeout_s)
            return JobResult(
                job_name=job_name,
                outcome=JobOutcome.CANCELLED,
                reason="timed out after {:g}s".format(timeout_s),
            )
        except asyncio.CancelledError:
            logger.warning("Stopped waiting for %s: interrupted", job_name)
            return JobResult(job_name=job_name, outcome=JobOutcome.CANCELLED, reason="interrupted")

    async def _poll(
        self,
        job_name: str,
        poll_interval_s: float,
        on_status: Callable[[str], None] | None,
    ) -> JobResult:
        last_status: JobStatus | None = None
        while True:
            job = await asyncio.to_thread(self.get_job, job_name)
            if job is None:
                return JobResult(
                    job_name=job_name,
                    outcome=JobOutcome.FAILED,
                    reason="job no longer exists",
                )

            if job.status != last_status:
                logger.info("Job %s status: %s", job_name, job.status.value)
                last_status = job.status
            if on_status:
                on_status("Job status: {}".format(job.status.value))

            if job.status == JobStatus.COMPLETED:
                return JobResult(job_name=job_name, outcome=JobOutcome.COMPLETED)
            if job.status == JobStatus.FAILED:
                return JobResult(
                    job_name=job_name,
                    outcome=JobOutcome.FAILED,
                    reason=job.failure_reason or "unknown failure",
                )

            await asyncio.sleep(poll_interval_s)
