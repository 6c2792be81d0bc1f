# podpicker/transcripts/strategies/base.py
"""
Shared base definitions for all extraction strategies.

This module defines:
- The Strategy contract the chain relies on (an id and attempt(video_id))
- ExtractionStrategy, the base class that turns ExtractionError into a
  failed StrategyResult and treats an empty segment list as NOT_FOUND
- A lightweight timer for consistent execution_time_ms measurement

No extraction logic belongs here.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Protocol, Tuple, runtime_checkable

from podpicker.transcripts.config import PipelineConfig
from podpicker.transcripts.errors import ExtractionError
from podpicker.transcripts.http import HttpClient
from podpicker.transcripts.parsers.timedtext import looks_like_timed_text, parse_timed_text
from podpicker.transcripts.schema import (
    CaptionPayload,
    ExtractionFailure,
    FailureKind,
    StrategyResult,
    TranscriptSegment,
)


SUGGESTED_FIXES: Dict[FailureKind, List[str]] = {
    FailureKind.NOT_FOUND: ["Check that the video exists and has captions"],
    FailureKind.DISABLED: ["Captions are turned off by the uploader; try another video"],
    FailureKind.RATE_LIMITED: ["Wait before retrying", "Configure YOUTUBE_PROXY_HOST/YOUTUBE_PROXY_PORT"],
    FailureKind.PARSE_ERROR: ["Upstream markup may have changed; report with the video ID"],
    FailureKind.NETWORK_ERROR: ["Check connectivity", "Retry the request"],
    FailureKind.NOT_CONFIGURED: ["Set the API key or endpoint for the transcript service"],
}


@runtime_checkable
class Strategy(Protocol):
    """Anything the chain can run: a stable id and a non-raising attempt()."""

    id: str

    def attempt(self, video_id: str) -> StrategyResult:
        ...


@contextmanager
def timer() -> Iterator[Callable[[], float]]:
    """
    Context manager that provides an end() function returning elapsed milliseconds.

    Usage:
        with timer() as end:
            # do work
            pass
        execution_time_ms = end()
    """
    start = time.perf_counter()

    def end() -> float:
        return (time.perf_counter() - start) * 1000

    yield end


def failure_result(
    strategy_id: str,
    kind: FailureKind,
    message: str,
    execution_time_ms: Optional[float] = None,
) -> StrategyResult:
    return StrategyResult(
        strategy_id=strategy_id,
        success=False,
        failure=ExtractionFailure(
            kind=kind,
            message=message,
            source_strategy=strategy_id,
            suggested_fixes=SUGGESTED_FIXES.get(kind, []),
        ),
        execution_time_ms=execution_time_ms,
    )


class ExtractionStrategy:
    """
    Base class for concrete strategies.

    Subclasses set `id` and implement _extract(), raising ExtractionError for
    anticipated failures. attempt() never raises ExtractionError.
    """

    id: str = "base"

    def __init__(self, client: HttpClient, config: Optional[PipelineConfig] = None) -> None:
        self.client = client
        self.config = config or client.config

    def _extract(self, video_id: str) -> CaptionPayload:
        raise NotImplementedError

    def attempt(self, video_id: str) -> StrategyResult:
        with timer() as end:
            try:
                payload = self._extract(video_id)
            except ExtractionError as exc:
                return failure_result(self.id, exc.kind, exc.message, end())

            if not payload.segments:
                return failure_result(self.id, FailureKind.NOT_FOUND, "Strategy returned no segments", end())

            return StrategyResult(
                strategy_id=self.id,
                success=True,
                segments=payload.segments,
                language=payload.language,
                title=payload.title,
                execution_time_ms=end(),
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


def segments_from_timed_text(body: str) -> Tuple[TranscriptSegment, ...]:
    """
    Parse a fetched caption track, distinguishing "empty" from "unrecognised".

    Raises:
        ExtractionError: NOT_FOUND for an empty body or a cue-less timed-text
            document, PARSE_ERROR for anything that isn't timed text at all
    """
    segments = parse_timed_text(body)
    if segments:
        return tuple(segments)
    if body.strip() and not looks_like_timed_text(body):
        raise ExtractionError(FailureKind.PARSE_ERROR, "Caption track body is not timed-text XML")
    raise ExtractionError(FailureKind.NOT_FOUND, "Caption track is empty")
