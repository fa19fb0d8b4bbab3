"""AWS service wrappers: S3 object store and Transcribe job service.

WHY: The pipeline only needs a handful of remote operations: check/upload
/download an object, and check/start/watch a transcription job. Wrapping
them keeps boto3 details (request shapes, error codes) out of the
pipeline and lets tests swap in stubbed clients.

HOW: Each service takes an already-constructed boto3 client. "Not found"
responses are classified and returned as values; every other failure
propagates as the botocore exception it is.

RULES:
- All boto3 calls go through S3Service or TranscribeService
- Clients are injected, never created inside a service
- "Not found" is a normal branch, not an error
"""

from transcribe_meetings.aws.s3 import S3Service, is_not_found_error
from transcribe_meetings.aws.transcribe import (
    JobOutcome,
    JobResult,
    JobStatus,
    TranscribeService,
)

__all__ = [
    "JobOutcome",
    "JobResult",
    "JobStatus",
    "S3Service",
    "TranscribeService",
    "is_not_found_error",
]
