# podpicker/transcripts/errors.py
"""
Exception hierarchy for the transcript pipeline.

InvalidInput and NoTranscriptAvailable are the only errors callers of
get_transcript() are expected to handle. ExtractionError lives inside the
chain and never crosses it. ExtractionCancelled means the caller walked away.
"""

from __future__ import annotations

from typing import List, Sequence

from podpicker.transcripts.schema import ExtractionFailure, FailureKind


class TranscriptError(Exception):
    """Base class for every pipeline error."""


class InvalidInput(TranscriptError, ValueError):
    """The URL or ID could not be turned into a valid video ID."""

    def __init__(self, value: str, reason: str = "Not a recognisable YouTube URL or video ID") -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"{reason}: {value!r}")


class NoTranscriptAvailable(TranscriptError):
    """Every strategy failed. failures keeps one entry per strategy, in chain order."""

    def __init__(self, video_id: str, failures: Sequence[ExtractionFailure]) -> None:
        self.video_id = video_id
        self.failures: List[ExtractionFailure] = list(failures)
        summary = "; ".join(f"{f.source_strategy}: {f.kind.value}" for f in self.failures) or "no strategies configured"
        super().__init__(f"No transcript available for {video_id} ({summary})")

    @property
    def kinds(self) -> List[FailureKind]:
        return [failure.kind for failure in self.failures]


class ExtractionError(TranscriptError):
    """Raised by fetchers and parsers; turned into an ExtractionFailure by the strategy."""

    def __init__(self, kind: FailureKind, message: str) -> None:
        self.kind = kind
        self.message = message
        super().__init__(f"[{kind.value}] {message}")


class ExtractionCancelled(TranscriptError):
    """The caller signalled abandonment; in-flight work was aborted."""
