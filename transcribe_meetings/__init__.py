"""Transcribe Meetings: turn a local audio file into a text transcript.

WHY: Amazon Transcribe does the heavy lifting, but using it by hand means
uploading to S3, naming and starting a job, watching it, downloading a
JSON document and digging the text out of it. This package does all of
that in one command and makes repeated runs on the same file free.

HOW: Linear pipeline: fingerprint (content hash), store (S3 upload),
transcribe (start/poll a Transcribe job), format (flat or
speaker-labelled text). Each stage is independently testable.

RULES:
- Storage keys and job names derive from file content; only --force adds
  a timestamp to the job name
- All AWS calls go through the services in transcribe_meetings.aws
- Formatters are pure functions of the decoded TranscriptionResult
"""

__version__ = "0.3.0"

# Set at release time (e.g. from `git rev-parse HEAD`).
__commit__ = "unknown"
