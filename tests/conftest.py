"""Shared test fixtures for the transcribe_meetings test suite.

WHY: Several test modules need the same Transcribe result documents and
the same stand-ins for S3 and Transcribe. Centralizing them here keeps
every test on the same sample data.

HOW: Result documents follow the shape Transcribe writes to S3. The fake
clients implement only the boto3 client methods the services call and
raise real botocore ClientErrors with the codes AWS returns, so the
services' not-found handling is exercised as in production.

RULES:
- AWS is never contacted
- Fake Transcribe writes "<job>.json" into the fake S3 bucket when a
  job reaches COMPLETED, like the real service does
- Status sequences advance on each GetTranscriptionJob and stay on the
  last entry
"""

from __future__ import annotations

import copy
import io
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from botocore.exceptions import ClientError

from transcribe_meetings.aws.s3 import S3Service
from transcribe_meetings.aws.transcribe import TranscribeService
from transcribe_meetings.config import AppConfig

BUCKET = "meetings-bucket"

JOB_NOT_FOUND_MESSAGE = "The requested job couldn't be found. Check the job name and try again."


# ---------------------------------------------------------------------------
# Sample result documents
# ---------------------------------------------------------------------------

PLAIN_RESULT: Dict[str, Any] = {
    "jobName": "transcribe-0123456789abcdef",
    "accountId": "123456789012",
    "status": "COMPLETED",
    "results": {
        "transcripts": [{"transcript": "Hello, world. Hi"}],
        "items": [
            {"start_time": "0.04", "end_time": "0.51", "type": "pronunciation",
             "alternatives": [{"confidence": "0.998", "content": "Hello"}]},
            {"type": "punctuation", "alternatives": [{"confidence": "0.0", "content": ","}]},
            {"start_time": "0.52", "end_time": "0.98", "type": "pronunciation",
             "alternatives": [{"confidence": "0.995", "content": "world"}]},
            {"type": "punctuation", "alternatives": [{"confidence": "0.0", "content": "."}]},
            {"start_time": "1.40", "end_time": "1.62", "type": "pronunciation",
             "alternatives": [{"confidence": "0.990", "content": "Hi"}]},
        ],
    },
}

DIARIZED_RESULT: Dict[str, Any] = {
    "jobName": "transcribe-0123456789abcdef",
    "accountId": "123456789012",
    "status": "COMPLETED",
    "results": {
        "transcripts": [{"transcript": "Hello, world. Hi"}],
        "speaker_labels": {
            "speakers": 2,
            "segments": [
                {"start_time": "0.04", "end_time": "0.98", "speaker_label": "spk_0",
                 "items": [
                     {"start_time": "0.04", "end_time": "0.51", "speaker_label": "spk_0"},
                     {"start_time": "0.52", "end_time": "0.98", "speaker_label": "spk_0"},
                 ]},
                {"start_time": "1.40", "end_time": "1.62", "speaker_label": "spk_1",
                 "items": [
                     {"start_time": "1.40", "end_time": "1.62", "speaker_label": "spk_1"},
                 ]},
            ],
        },
        "items": [
            {"start_time": "0.04", "end_time": "0.51", "type": "pronunciation", "speaker_label": "spk_0",
             "alternatives": [{"confidence": "0.998", "content": "Hello"}]},
            {"type": "punctuation", "alternatives": [{"confidence": "0.0", "content": ","}]},
            {"start_time": "0.52", "end_time": "0.98", "type": "pronunciation", "speaker_label": "spk_0",
             "alternatives": [{"confidence": "0.995", "content": "world"}]},
            {"type": "punctuation", "alternatives": [{"confidence": "0.0", "content": "."}]},
            {"start_time": "1.40", "end_time": "1.62", "type": "pronunciation", "speaker_label": "spk_1",
             "alternatives": [{"confidence": "0.990", "content": "Hi"}]},
        ],
    },
}


@pytest.fixture
def plain_result_doc():
    """A Transcribe result document without diarization."""
    return copy.deepcopy(PLAIN_RESULT)


@pytest.fixture
def diarized_result_doc():
    """A Transcribe result document with two speakers."""
    return copy.deepcopy(DIARIZED_RESULT)


# ---------------------------------------------------------------------------
# Fake boto3 clients
# ---------------------------------------------------------------------------


def client_error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeS3Client:
    """In-memory stand-in for a boto3 S3 client."""

    def __init__(self, buckets=(BUCKET,)):
        self.buckets = set(buckets)
        self.objects: Dict[tuple, bytes] = {}
        self.calls: List[str] = []

    def head_bucket(self, Bucket):
        self.calls.append("head_bucket")
        if Bucket not in self.buckets:
            raise client_error("404", "Not Found", "HeadBucket")
        return {}

    def head_object(self, Bucket, Key):
        self.calls.append("head_object")
        if (Bucket, Key) not in self.objects:
            raise client_error("404", "Not Found", "HeadObject")
        return {"ContentLength": len(self.objects[(Bucket, Key)])}

    def upload_file(self, Filename, Bucket, Key):
        self.calls.append("upload_file")
        with open(Filename, "rb") as f:
            self.objects[(Bucket, Key)] = f.read()

    def get_object(self, Bucket, Key):
        self.calls.append("get_object")
        if (Bucket, Key) not in self.objects:
            raise client_error("NoSuchKey", "The specified key does not exist.", "GetObject")
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}


class FakeTranscribeClient:
    """In-memory stand-in for a boto3 Transcribe client.

    Args:
        s3: The fake S3 client results are written to.
        result_doc: Document written as "<job>.json" on completion.
        statuses: Status sequence each new job goes through.
        failure_reason: FailureReason reported with FAILED.
    """

    def __init__(
        self,
        s3: FakeS3Client,
        result_doc: Dict[str, Any],
        statuses: Optional[List[str]] = None,
        failure_reason: str = "The media format provided does not match the detected media format.",
    ):
        self.s3 = s3
        self.result_doc = result_doc
        self.statuses = statuses or ["IN_PROGRESS", "COMPLETED"]
        self.failure_reason = failure_reason
        self.jobs: Dict[str, Dict[str, Any]] = {}
        self.started: List[Dict[str, Any]] = []

    def start_transcription_job(self, **params):
        name = params["TranscriptionJobName"]
        if name in self.jobs:
            raise client_error("ConflictException", "The requested job name already exists.", "StartTranscriptionJob")
        self.started.append(params)
        self.jobs[name] = {"params": params, "statuses": list(self.statuses)}
        return {"TranscriptionJob": {"TranscriptionJobName": name, "TranscriptionJobStatus": "QUEUED"}}

    def get_transcription_job(self, TranscriptionJobName):
        job = self.jobs.get(TranscriptionJobName)
        if job is None:
            raise client_error("BadRequestException", JOB_NOT_FOUND_MESSAGE, "GetTranscriptionJob")
        statuses = job["statuses"]
        status = statuses.pop(0) if len(statuses) > 1 else statuses[0]
        info = {"TranscriptionJobName": TranscriptionJobName, "TranscriptionJobStatus": status}
        if status == "COMPLETED":
            bucket = job["params"]["OutputBucketName"]
            key = "{}.json".format(TranscriptionJobName)
            self.s3.objects[(bucket, key)] = json.dumps(self.result_doc).encode("utf-8")
        if status == "FAILED":
            info["FailureReason"] = self.failure_reason
        return {"TranscriptionJob": info}


@pytest.fixture
def fake_s3():
    return FakeS3Client()


@pytest.fixture
def fake_transcribe(fake_s3, plain_result_doc):
    return FakeTranscribeClient(fake_s3, plain_result_doc)


@pytest.fixture
def services(fake_s3, fake_transcribe):
    """(S3Service, TranscribeService) backed by the fake clients."""
    return S3Service(fake_s3), TranscribeService(fake_transcribe)


# ---------------------------------------------------------------------------
# Local files and configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def audio_file(tmp_path) -> Path:
    """A small stand-in for an m4a recording."""
    path = tmp_path / "standup.m4a"
    path.write_bytes(b"\x00\x00\x00\x20ftypM4A " + b"weekly standup audio" * 64)
    return path


@pytest.fixture
def make_config(tmp_path, audio_file):
    """Factory for AppConfig with fast polling and no deadline."""

    def _make(**overrides) -> AppConfig:
        values: Dict[str, Any] = {
            "input_path": audio_file,
            "output_path": tmp_path / "standup.txt",
            "bucket": BUCKET,
            "poll_interval_s": 0.01,
            "timeout_s": None,
        }
        values.update(overrides)
        return AppConfig(**values)

    return _make


@pytest.fixture
def make_transcribe(fake_s3, plain_result_doc):
    """Factory for FakeTranscribeClient sharing the fake_s3 bucket."""

    def _make(result_doc=None, **kwargs) -> FakeTranscribeClient:
        return FakeTranscribeClient(fake_s3, result_doc if result_doc is not None else plain_result_doc, **kwargs)

    return _make


@pytest.fixture
def make_s3():
    """Factory for FakeS3Client with custom buckets."""
    return FakeS3Client


@pytest.fixture(autouse=True)
def clean_transcribe_env(monkeypatch):
    """Keep TRANSCRIBE_* settings from the developer's shell out of tests."""
    for name in ("TRANSCRIBE_DIARIZATION", "TRANSCRIBE_MAX_SPEAKERS", "TRANSCRIBE_POLL_INTERVAL", "TRANSCRIBE_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
