"""Amazon S3 operations used by the pipeline.

WHY: The audio must be in S3 before Transcribe can read it, and
Transcribe writes its result back to S3. Checking for the object first
makes re-runs on the same file skip the upload.

HOW: Thin wrapper over a boto3 S3 client. HeadObject decides existence.
The managed transfer (client.upload_file) streams the file and switches
to a multipart upload for large recordings. GetObject returns the body
as bytes.

RULES:
- object_exists() returns False only for a "not found" response;
  any other error (403, throttling, ...) propagates
- head_bucket() raises if the bucket is missing or not accessible
- Files are streamed from disk, not read into memory
"""

from __future__ import annotations

import logging
from pathlib import Path

from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound", "NotFoundException", "NoSuchBucket"})


def is_not_found_error(err: Exception) -> bool:
    """Return True if ``err`` is an AWS response meaning "does not exist"."""
    if not isinstance(err, ClientError):
        return False
    code = err.response.get("Error", {}).get("Code", "")
    return code in NOT_FOUND_CODES


class S3Service:
    """Object store operations on a boto3 S3 client."""

    def __init__(self, client) -> None:  # noqa: ANN001
        self._client = client

    def head_bucket(self, bucket: str) -> None:
        """Check that ``bucket`` exists and is accessible."""
        self._client.head_bucket(Bucket=bucket)

    def object_exists(self, bucket: str, key: str) -> bool:
        """Return True if ``key`` exists in ``bucket``."""
        try:
            self._client.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if is_not_found_error(e):
                return False
            raise
        return True

    def upload_file(self, bucket: str, key: str, path: Path) -> None:
        """Upload the file at ``path`` to ``bucket``/``key``.

        Uses boto3 managed transfer, so large recordings go up as a
        multipart upload with per-part retries.
        """
        logger.debug("Uploading %s to s3://%s/%s", path, bucket, key)
        self._client.upload_file(str(path), bucket, key)

    def get_object(self, bucket: str, key: str) -> bytes:
        """Download ``bucket``/``key`` and return its content."""
        logger.debug("GetObject s3://%s/%s", bucket, key)
        resp = self._client.get_object(Bucket=bucket, Key=key)
        body = resp["Body"]
        try:
            return body.read()
        finally:
            body.close()
