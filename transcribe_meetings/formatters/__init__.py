"""Output formatter registry and selection.

WHY: The pipeline needs one call that turns a decoded result into output
text, choosing the speaker-labelled rendering only when it is actually
possible. Keeping the choice here means the formatters themselves stay
single-purpose.

HOW: FORMATTERS maps string keys to formatter *classes*.
select_formatter() applies the fallback rule; format_transcript() runs it.

RULES:
- Speaker rendering requires BOTH diarization requested AND a
  speaker_labels block in the result; otherwise the flat transcript
- Never fabricate speaker structure
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from transcribe_meetings.core.models import TranscriptionResult
from transcribe_meetings.formatters.base import NoTranscriptError
from transcribe_meetings.formatters.plain_text import PlainTextFormatter
from transcribe_meetings.formatters.speaker_labels import SpeakerFormatter

if TYPE_CHECKING:
    from transcribe_meetings.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "plain_text": PlainTextFormatter,
    "speakers": SpeakerFormatter,
}


def select_formatter(result: TranscriptionResult, diarization: bool) -> BaseFormatter:
    """Return the formatter that applies to ``result``."""
    if diarization and result.speaker_labels is not None:
        return FORMATTERS["speakers"]()
    return FORMATTERS["plain_text"]()


def format_transcript(result: TranscriptionResult, diarization: bool) -> str:
    """Render ``result`` as the text written to the output file.

    Raises:
        NoTranscriptError: If the result holds no transcript.
    """
    return select_formatter(result, diarization).format(result)


__all__ = [
    "FORMATTERS",
    "NoTranscriptError",
    "PlainTextFormatter",
    "SpeakerFormatter",
    "format_transcript",
    "select_formatter",
]
