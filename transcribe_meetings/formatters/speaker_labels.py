"""Speaker-labelled transcript formatter.

WHY: Meeting transcripts are far easier to read when each speaker turn is
its own paragraph. Transcribe's flat transcript drops the speaker
attribution, so the text has to be rebuilt from the timed items, which
carry a speaker label per word when diarization was enabled.

HOW: Walk the items in order, appending to the output text. A word whose
speaker label differs from the active one opens a new paragraph with a
"Speaker N: " header. Punctuation is attached to the preceding token
with no space.

RULES:
- Items with no alternatives are skipped entirely
- Punctuation: content appended with no separator
- Word with a new, non-empty speaker label: "\\n\\n" (unless nothing has
  been written yet), then "Speaker <N>: " with any "spk_" prefix stripped
- Word: preceded by one space unless the output is empty or ends with
  the ": " of a header
- A word with no speaker label keeps the active speaker
- No trailing cleanup
"""

from __future__ import annotations

from typing import Optional

from transcribe_meetings.core.models import ITEM_TYPE_PRONUNCIATION, TranscriptionResult
from transcribe_meetings.formatters.base import BaseFormatter, NoTranscriptError

SPEAKER_LABEL_PREFIX = "spk_"
_HEADER_END = ": "


def speaker_header(label: str) -> str:
    """Return the paragraph header for a Transcribe speaker label.

    >>> speaker_header("spk_12")
    'Speaker 12: '
    """
    if label.startswith(SPEAKER_LABEL_PREFIX):
        label = label[len(SPEAKER_LABEL_PREFIX):]
    return "Speaker {}{}".format(label, _HEADER_END)


def format_with_speakers(result: TranscriptionResult) -> str:
    """Rebuild the transcript from items as speaker-labelled paragraphs."""
    text = ""
    current_speaker: Optional[str] = None

    for item in result.items:
        content = item.content
        if content is None:
            continue

        if item.is_punctuation:
            text += content
            continue

        if item.type != ITEM_TYPE_PRONUNCIATION:
            continue

        if item.speaker_label and item.speaker_label != current_speaker:
            current_speaker = item.speaker_label
            if text:
                text += "\n\n"
            text += speaker_header(current_speaker)

        if text and not text.endswith(_HEADER_END):
            text += " "
        text += content

    return text


class SpeakerFormatter(BaseFormatter):
    """Formatter that produces "Speaker N: ..." paragraphs."""

    @property
    def name(self) -> str:
        return "Speaker Labels"

    def format(self, result: TranscriptionResult) -> str:
        if not result.transcripts:
            raise NoTranscriptError()
        return format_with_speakers(result)
