# podpicker/transcripts/chain.py
"""
Sequential strategy chain.

Responsibilities:
- Run strategies in order, stopping at the first non-empty success
- Record one failure per failed strategy, in order
- Recover unexpected strategy exceptions as PARSE_ERROR failures
- Raise NoTranscriptAvailable when every strategy failed

No retries, no backoff, no parallelism. Orchestration only.
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import List, Optional, Sequence

from podpicker.logging_core.logger import get_logger, log_event
from podpicker.transcripts.collector import AttemptCollector
from podpicker.transcripts.config import PipelineConfig
from podpicker.transcripts.errors import ExtractionCancelled, NoTranscriptAvailable
from podpicker.transcripts.http import HttpClient
from podpicker.transcripts.schema import FailureKind, StrategyResult
from podpicker.transcripts.strategies import (
    CaptionLibraryStrategy,
    DirectTimedTextStrategy,
    Strategy,
    ThirdPartyServiceStrategy,
    WatchPageTrackListStrategy,
    failure_result,
)


def default_strategies(client: HttpClient, config: Optional[PipelineConfig] = None) -> List[Strategy]:
    """Production order: direct timedtext, watch page, caption library, third-party service."""
    config = config or client.config
    return [
        DirectTimedTextStrategy(client, config),
        WatchPageTrackListStrategy(client, config),
        CaptionLibraryStrategy(client, config),
        ThirdPartyServiceStrategy(client, config),
    ]


class StrategyChain:
    """
    Ordered, first-success-wins list of strategies.

    Usage:
        chain = StrategyChain(default_strategies(client), logger)
        result = chain.run(video_id)
    """

    def __init__(self, strategies: Sequence[Strategy], logger: Optional[logging.LoggerAdapter] = None) -> None:
        self.strategies = list(strategies)
        self.logger = logger or get_logger(uuid.uuid4())
        self.collector: Optional[AttemptCollector] = None

    def run(self, video_id: str) -> StrategyResult:
        """
        Return the first successful result.

        Raises:
            NoTranscriptAvailable: every strategy failed (failures in chain order)
            ExtractionCancelled: the caller abandoned the request
        """
        run_id = (getattr(self.logger, "extra", None) or {}).get("run_id", "")
        collector = AttemptCollector(run_id)
        self.collector = collector

        for strategy in self.strategies:
            log_event(
                self.logger,
                logging.INFO,
                "Trying strategy",
                component=strategy.id,
                event_type="start",
                metadata={"video_id": video_id},
            )

            result = self._attempt(strategy, video_id)
            collector.add(result)

            if result.success:
                log_event(
                    self.logger,
                    logging.INFO,
                    "Strategy succeeded",
                    component=strategy.id,
                    event_type="success",
                    metadata={
                        "video_id": video_id,
                        "segments": len(result.segments),
                        "language": result.language,
                        "execution_time_ms": result.execution_time_ms,
                    },
                )
                return result

            log_event(
                self.logger,
                logging.WARNING,
                "Strategy failed",
                component=strategy.id,
                event_type="failure",
                metadata={
                    "video_id": video_id,
                    "kind": result.failure.kind.value if result.failure else None,
                    "reason": result.failure.message if result.failure else None,
                    "execution_time_ms": result.execution_time_ms,
                },
            )

        error = NoTranscriptAvailable(video_id, collector.failures())
        log_event(
            self.logger,
            logging.ERROR,
            "All strategies exhausted",
            component="chain",
            event_type="exhausted",
            metadata={"video_id": video_id, "kinds": [kind.value for kind in error.kinds]},
        )
        raise error

    def _attempt(self, strategy: Strategy, video_id: str) -> StrategyResult:
        try:
            result = strategy.attempt(video_id)
        except ExtractionCancelled:
            raise
        except Exception as exc:  # pylint: disable=broad-except
            return failure_result(strategy.id, FailureKind.PARSE_ERROR, f"Unexpected {type(exc).__name__}: {exc}")

        # A success with nothing in it is treated as "no captions"
        if result.success and not result.segments:
            return failure_result(
                strategy.id,
                FailureKind.NOT_FOUND,
                "Strategy returned no segments",
                result.execution_time_ms,
            )
        if not result.success and result.failure is None:
            return failure_result(
                strategy.id,
                FailureKind.PARSE_ERROR,
                "Strategy failed without reporting why",
                result.execution_time_ms,
            )
        return result


def extract_transcript(
    video_id: str,
    strategies: Optional[Sequence[Strategy]] = None,
    config: Optional[PipelineConfig] = None,
    client: Optional[HttpClient] = None,
    logger: Optional[logging.LoggerAdapter] = None,
    cancel_event: Optional[threading.Event] = None,
) -> StrategyResult:
    """
    Run the chain for an already-resolved video ID.

    Builds the default strategies (and an HttpClient) when none are given.
    """
    owns_client = client is None and strategies is None
    if strategies is None:
        client = client or HttpClient(config, cancel_event=cancel_event)
        strategies = default_strategies(client, config)

    try:
        return StrategyChain(strategies, logger).run(video_id)
    finally:
        if owns_client and client is not None:
            client.close()
