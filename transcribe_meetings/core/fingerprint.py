"""Content addressing: map file bytes to deterministic remote names.

WHY: Re-running the tool on the same recording should not upload it again
or pay for a second transcription. Deriving the S3 key and job name from
a hash of the file content makes both remote artifacts findable on the
next run, so the existence checks turn repeat runs into no-ops.

HOW: SHA-256 over the full file (streamed in chunks), hex digest
truncated to 16 characters. ArtifactNames bundles the three names built
from it.

RULES:
- Same bytes → same fingerprint → same media key, job name, result key
- The file name is part of the media key only; renaming a file re-uploads
  it but reuses the job
- Transcribe writes its output as "<job_name>.json" in the output bucket
- A suffix (forced runs) only changes the job name and result key
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path

FINGERPRINT_LENGTH = 16
UPLOAD_PREFIX = "uploads/"
JOB_NAME_PREFIX = "transcribe-"

_CHUNK_SIZE = 1024 * 1024


def file_fingerprint(path: Path, length: int = FINGERPRINT_LENGTH) -> str:
    """Return the first ``length`` hex digits of the file's SHA-256 digest."""
    hasher = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()[:length]


@dataclass(frozen=True)
class ArtifactNames:
    """Remote names derived from one input file.

    Attributes:
        fingerprint: Truncated content digest.
        media_key: S3 key the audio is uploaded to.
        job_name: Transcribe job name.
        result_key: S3 key Transcribe writes the result JSON to.
    """

    fingerprint: str
    media_key: str
    job_name: str
    result_key: str

    @classmethod
    def for_file(
        cls,
        path: Path,
        fingerprint: str,
        suffix: str | None = None,
    ) -> ArtifactNames:
        """Build the names for ``path`` given its fingerprint.

        Args:
            path: Input file; only its base name is used.
            fingerprint: Value returned by file_fingerprint().
            suffix: Optional job-name suffix, used to start a fresh job
                without touching the one that already exists.
        """
        job_name = JOB_NAME_PREFIX + fingerprint
        if suffix:
            job_name = "{}-{}".format(job_name, suffix)
        return cls(
            fingerprint=fingerprint,
            media_key="{}{}_{}".format(UPLOAD_PREFIX, fingerprint, Path(path).name),
            job_name=job_name,
            result_key="{}.json".format(job_name),
        )
