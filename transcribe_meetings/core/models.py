"""Decoded Amazon Transcribe result document.

WHY: Transcribe writes its output as a JSON document in S3. Formatters
need typed, ordered access to the transcript strings, the timed items
(words and punctuation) and the optional speaker-label block. Typed
frozen dataclasses make that structure explicit and keep it immutable
once decoded.

HOW: The raw document is first validated against RESULT_SCHEMA with
jsonschema so a truncated or foreign file fails with a clear message
instead of a KeyError deep inside a formatter. Each dataclass then maps
1:1 to a JSON object through a from_dict() factory.

RULES:
- Item order is preserved exactly as delivered; it is the reading order
- speaker_labels is None unless diarization was requested and supported
- Missing "results" or "transcripts" decode to empty tuples; deciding
  whether that is an error belongs to the formatter
- Sequences are tuples so a decoded result cannot be mutated
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

import jsonschema

ITEM_TYPE_PRONUNCIATION = "pronunciation"
ITEM_TYPE_PUNCTUATION = "punctuation"

_TIME = {"type": "string"}

RESULT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "jobName": {"type": "string"},
        "status": {"type": "string"},
        "results": {
            "type": "object",
            "properties": {
                "transcripts": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {"transcript": {"type": "string"}},
                        "required": ["transcript"],
                    },
                },
                "speaker_labels": {
                    "type": "object",
                    "properties": {
                        "speakers": {"type": "integer"},
                        "segments": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "start_time": _TIME,
                                    "end_time": _TIME,
                                    "speaker_label": {"type": "string"},
                                    "items": {"type": "array"},
                                },
                            },
                        },
                    },
                },
                "items": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "start_time": _TIME,
                            "end_time": _TIME,
                            "type": {"type": "string"},
                            "speaker_label": {"type": "string"},
                            "alternatives": {
                                "type": "array",
                                "items": {
                                    "type": "object",
                                    "properties": {
                                        "confidence": {"type": "string"},
                                        "content": {"type": "string"},
                                    },
                                    "required": ["content"],
                                },
                            },
                        },
                        "required": ["type"],
                    },
                },
            },
        },
    },
}
"""Shape of the Transcribe output document, restricted to the fields we read."""


class MalformedResultError(ValueError):
    """Raised when a result document is not valid JSON or fails the schema."""


@dataclass(frozen=True)
class Alternative:
    """One recognition candidate for an item."""

    content: str
    confidence: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> Alternative:
        return cls(content=data["content"], confidence=data.get("confidence"))


@dataclass(frozen=True)
class Item:
    """A single word or punctuation mark from the result.

    RULES:
    - type is "pronunciation" (word) or "punctuation"
    - alternatives[0] is the best guess; the tuple may be empty
    - speaker_label is set only when diarization produced one, e.g. "spk_0"
    - punctuation items usually carry no start/end time
    """

    type: str
    alternatives: Tuple[Alternative, ...] = ()
    speaker_label: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @property
    def content(self) -> Optional[str]:
        """Best-guess content, or None when there are no alternatives."""
        if not self.alternatives:
            return None
        return self.alternatives[0].content

    @property
    def is_punctuation(self) -> bool:
        return self.type == ITEM_TYPE_PUNCTUATION

    @classmethod
    def from_dict(cls, data: dict) -> Item:
        return cls(
            type=data["type"],
            alternatives=tuple(Alternative.from_dict(a) for a in data.get("alternatives", [])),
            speaker_label=data.get("speaker_label") or None,
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
        )


@dataclass(frozen=True)
class SpeakerSegment:
    """A time range attributed to one speaker."""

    speaker_label: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    item_count: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> SpeakerSegment:
        return cls(
            speaker_label=data.get("speaker_label", ""),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            item_count=len(data.get("items", [])),
        )


@dataclass(frozen=True)
class SpeakerLabels:
    """Diarization metadata: speaker count and time-ranged segments."""

    speakers: int
    segments: Tuple[SpeakerSegment, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> SpeakerLabels:
        return cls(
            speakers=data.get("speakers", 0),
            segments=tuple(SpeakerSegment.from_dict(s) for s in data.get("segments", [])),
        )


@dataclass(frozen=True)
class TranscriptionResult:
    """The decoded output of one Transcribe job.

    RULES:
    - transcripts[0] is the authoritative whole-transcript string
    - items define reading order for speaker-labelled output
    - status is the job status recorded in the document ("" if absent)
    """

    transcripts: Tuple[str, ...]
    items: Tuple[Item, ...] = ()
    speaker_labels: Optional[SpeakerLabels] = None
    status: str = ""
    job_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> TranscriptionResult:
        """Validate ``data`` against RESULT_SCHEMA and decode it.

        Raises:
            MalformedResultError: If the document does not match the schema.
        """
        try:
            jsonschema.validate(instance=data, schema=RESULT_SCHEMA)
        except jsonschema.ValidationError as e:
            path = "/".join(str(p) for p in e.absolute_path) or "<root>"
            raise MalformedResultError(
                "transcription result does not match the expected format at {}: {}".format(
                    path, e.message
                )
            ) from e

        results = data.get("results", {})
        labels = results.get("speaker_labels")
        return cls(
            transcripts=tuple(t["transcript"] for t in results.get("transcripts", [])),
            items=tuple(Item.from_dict(i) for i in results.get("items", [])),
            speaker_labels=SpeakerLabels.from_dict(labels) if labels is not None else None,
            status=data.get("status", ""),
            job_name=data.get("jobName"),
        )

    @classmethod
    def from_json(cls, raw: Union[bytes, str]) -> TranscriptionResult:
        """Decode a result document downloaded from S3."""
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedResultError("transcription result is not valid JSON: {}".format(e)) from e
        return cls.from_dict(data)
