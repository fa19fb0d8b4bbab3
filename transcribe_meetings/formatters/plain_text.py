"""Flat transcript formatter.

WHY: Without diarization Transcribe already provides the whole transcript
as one punctuated string. Using it verbatim is both the simplest output
and the fallback whenever speaker structure is unavailable.

RULES:
- Output is transcripts[0] exactly as delivered
- Empty transcripts raise NoTranscriptError
"""

from __future__ import annotations

from transcribe_meetings.core.models import TranscriptionResult
from transcribe_meetings.formatters.base import BaseFormatter, NoTranscriptError


class PlainTextFormatter(BaseFormatter):
    """Formatter that returns the service's own flat transcript."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, result: TranscriptionResult) -> str:
        if not result.transcripts:
            raise NoTranscriptError()
        return result.transcripts[0]
