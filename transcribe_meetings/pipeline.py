"""The transcription run: local file in, transcript file out.

WHY: Every entry point (CLI today) needs the same sequence of steps with
the same idempotence guarantees. Keeping it in one coroutine, separate
from argument parsing and client construction, makes it testable with
stubbed AWS clients.

HOW: A single linear sequence: check bucket, fingerprint, upload if
absent, start job if absent, wait, download, decode, format, write.
The only suspension point is the job wait, which reports cancellation
as a PipelineResult instead of raising.

RULES:
- Identical file content always maps to the same media key and job name
  (unless config.force, which starts a fresh, timestamp-suffixed job)
- A second run on the same file performs no upload and no job start
- A FAILED job raises TranscriptionJobFailedError
- A cancelled wait writes nothing and returns outcome CANCELLED
- The output file is written only after formatting succeeded
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from transcribe_meetings.aws.s3 import S3Service
from transcribe_meetings.aws.transcribe import JobOutcome, TranscribeService
from transcribe_meetings.config import AppConfig
from transcribe_meetings.core.fingerprint import ArtifactNames, file_fingerprint
from transcribe_meetings.core.models import TranscriptionResult
from transcribe_meetings.formatters import format_transcript

logger = logging.getLogger(__name__)


class TranscriptionJobFailedError(Exception):
    """Raised when Transcribe reports the job as FAILED."""

    def __init__(self, job_name: str, reason: str | None) -> None:
        self.job_name = job_name
        self.reason = reason
        super().__init__("transcription job {} failed: {}".format(job_name, reason))


@dataclass(frozen=True)
class PipelineResult:
    """Summary of one run.

    Attributes:
        outcome: COMPLETED or CANCELLED (failures raise instead).
        names: Remote names used for this input.
        uploaded: True if the audio was uploaded during this run.
        job_started: True if a transcription job was started during this run.
        output_written: True if the output file was written.
        reason: Why the run was cancelled, if it was.
    """

    outcome: JobOutcome
    names: ArtifactNames
    uploaded: bool
    job_started: bool
    output_written: bool = False
    reason: str | None = None


def _force_suffix() -> str:
    """UTC timestamp plus a short random part, unique per forced run."""
    return "{}-{}".format(datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S"), uuid.uuid4().hex[:6])


async def run_pipeline(
    config: AppConfig,
    s3: S3Service,
    transcriber: TranscribeService,
    on_status: Callable[[str], None] | None = None,
) -> PipelineResult:
    """Transcribe ``config.input_path`` into ``config.output_path``.

    Args:
        config: Validated run configuration.
        s3: Object store service.
        transcriber: Transcribe job service.
        on_status: Optional callback for progress messages.

    Returns:
        PipelineResult describing what happened.

    Raises:
        TranscriptionJobFailedError: The job ended in FAILED.
        MalformedResultError: The result document could not be decoded.
        NoTranscriptError: The result holds no transcript.
        botocore.exceptions.ClientError: Any other AWS failure.
    """

    def status(msg: str) -> None:
        if on_status:
            on_status(msg)

    await asyncio.to_thread(s3.head_bucket, config.bucket)

    fingerprint = await asyncio.to_thread(file_fingerprint, config.input_path)
    names = ArtifactNames.for_file(
        config.input_path,
        fingerprint,
        suffix=_force_suffix() if config.force else None,
    )
    status("Using S3 key: {}".format(names.media_key))
    status("Using transcription job name: {}".format(names.job_name))

    uploaded = False
    if await asyncio.to_thread(s3.object_exists, config.bucket, names.media_key):
        status("File already exists in S3; skipping upload.")
    else:
        status("Uploading file to S3...")
        await asyncio.to_thread(s3.upload_file, config.bucket, names.media_key, config.input_path)
        uploaded = True
        status("Upload completed.")

    job_started = await asyncio.to_thread(
        transcriber.ensure_job,
        names.job_name,
        config.bucket,
        names.media_key,
        config,
        on_status,
    )

    job = await transcriber.wait_for_completion(
        names.job_name,
        poll_interval_s=config.poll_interval_s,
        timeout_s=config.timeout_s,
        on_status=on_status,
    )
    if job.outcome == JobOutcome.CANCELLED:
        return PipelineResult(
            outcome=JobOutcome.CANCELLED,
            names=names,
            uploaded=uploaded,
            job_started=job_started,
            reason=job.reason,
        )
    if job.outcome == JobOutcome.FAILED:
        raise TranscriptionJobFailedError(names.job_name, job.reason)
    status("Transcription job completed.")

    status("Retrieving transcription result from S3: {}".format(names.result_key))
    raw = await asyncio.to_thread(s3.get_object, config.bucket, names.result_key)
    result = TranscriptionResult.from_json(raw)

    if config.diarization and result.speaker_labels is None:
        logger.warning("Diarization requested but the result has no speaker labels")
    text = format_transcript(result, config.diarization)

    config.output_path.write_text(text, encoding="utf-8")
    status("Transcript saved to {}".format(config.output_path))

    return PipelineResult(
        outcome=JobOutcome.COMPLETED,
        names=names,
        uploaded=uploaded,
        job_started=job_started,
        output_written=True,
    )
