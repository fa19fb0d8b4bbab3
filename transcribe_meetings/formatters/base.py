"""Abstract base formatter.

WHY: The pipeline picks between output renderings at run time (flat
transcript or speaker-labelled paragraphs). A shared interface lets it
treat them uniformly and keeps each rendering independently testable.

HOW: BaseFormatter is an ABC with a ``name`` property and a ``format()``
method that turns a TranscriptionResult into the text written to disk.

RULES:
- Subclasses MUST implement ``name`` and ``format()``
- ``format()`` is pure: no I/O, no mutation of its input
- Output is returned as-is; no trailing cleanup
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from transcribe_meetings.core.models import TranscriptionResult


class NoTranscriptError(ValueError):
    """Raised when a completed job's result holds no transcript."""

    def __init__(self) -> None:
        super().__init__("no transcript found in result")


class BaseFormatter(ABC):
    """Abstract base for transcript formatters.

    To add a new rendering:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Speaker Labels'."""

    @abstractmethod
    def format(self, result: TranscriptionResult) -> str:
        """Render the decoded result as output text.

        Raises:
            NoTranscriptError: If the result holds no transcript.
        """
