# podpicker/transcripts/assembler.py
"""
Public entry points for transcript extraction.

Responsibilities:
- Resolve the caller's URL or ID (fail fast on bad input)
- Run the title lookup on a worker thread while the chain runs here
- Assemble and validate the final Transcript

No extraction logic lives here, only orchestration.
"""

from __future__ import annotations

import logging
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, Optional, Sequence, Tuple

from podpicker.logging_core.logger import get_logger, log_event
from podpicker.transcripts.chain import StrategyChain, default_strategies
from podpicker.transcripts.config import PipelineConfig
from podpicker.transcripts.errors import InvalidInput, NoTranscriptAvailable
from podpicker.transcripts.http import HttpClient
from podpicker.transcripts.resolver import resolve_video_id
from podpicker.transcripts.schema import Transcript
from podpicker.transcripts.strategies import Strategy
from podpicker.transcripts.title import placeholder_title, resolve_title


TitleResolver = Callable[[str], str]


def _resolve_title_on_fork(
    video_id: str,
    client: HttpClient,
    stop: threading.Event,
    logger: logging.LoggerAdapter,
) -> str:
    # Runs on the worker thread with its own session
    with client.fork(stop) as title_client:
        return resolve_title(video_id, title_client, logger)


def _resolve_id(video_url_or_id: str, logger: logging.LoggerAdapter) -> str:
    try:
        video_id = resolve_video_id(video_url_or_id)
    except InvalidInput as exc:
        log_event(
            logger,
            logging.WARNING,
            "Rejected input",
            component="resolver",
            event_type="failure",
            metadata={"input": video_url_or_id, "reason": exc.reason},
        )
        raise

    log_event(
        logger,
        logging.INFO,
        "Resolved video ID",
        component="resolver",
        event_type="success",
        metadata={"video_id": video_id},
    )
    return video_id


def get_transcript(
    video_url_or_id: str,
    config: Optional[PipelineConfig] = None,
    *,
    strategies: Optional[Sequence[Strategy]] = None,
    title_resolver: Optional[TitleResolver] = None,
    client: Optional[HttpClient] = None,
    cancel_event: Optional[threading.Event] = None,
    run_id: Optional[uuid.UUID | str] = None,
) -> Transcript:
    """
    Fetch a transcript for a YouTube URL or bare video ID.

    Args:
        video_url_or_id: any supported YouTube URL form, or an 11-char ID
        config: pipeline settings (PipelineConfig() when omitted)
        strategies: override the default strategy chain
        title_resolver: override the watch-page title lookup
        client: HttpClient for the strategies; created (and closed) here when
            omitted. The default title lookup runs on a fork of it.
        cancel_event: set it to abandon in-flight requests
        run_id: correlation ID stamped on every log line

    Returns:
        A validated Transcript (fullText is the space-joined segment texts)

    Raises:
        InvalidInput: the input is not a recognisable URL or ID
        NoTranscriptAvailable: every strategy failed
        ExtractionCancelled: cancel_event was set mid-flight
    """
    config = config or (client.config if client is not None else PipelineConfig())
    logger = get_logger(run_id or uuid.uuid4())

    log_event(
        logger,
        logging.INFO,
        "Starting transcript extraction",
        component="assembler",
        event_type="pipeline_start",
        metadata={"input": video_url_or_id},
    )
    video_id = _resolve_id(video_url_or_id, logger)

    owns_client = client is None
    client = client or HttpClient(config, cancel_event=cancel_event)
    title_stop = threading.Event()
    if title_resolver is None:
        title_resolver = partial(_resolve_title_on_fork, client=client, stop=title_stop, logger=logger)
    if strategies is None:
        strategies = default_strategies(client, config)

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="podpicker-title")
    try:
        title_future = executor.submit(title_resolver, video_id)
        result = StrategyChain(strategies, logger).run(video_id)
        title = title_future.result()
    finally:
        # An unfinished title lookup is abandoned at its next request or chunk
        title_stop.set()
        executor.shutdown(wait=False, cancel_futures=True)
        if owns_client:
            client.close()

    placeholder = placeholder_title(video_id)
    if title == placeholder and result.title:
        title = result.title

    transcript = Transcript.assemble(
        video_id,
        title or placeholder,
        result.segments,
        source_strategy=result.strategy_id,
        language=result.language,
    )

    log_event(
        logger,
        logging.INFO,
        "Transcript assembled",
        component="assembler",
        event_type="pipeline_success",
        metadata={
            "video_id": video_id,
            "source_strategy": result.strategy_id,
            "segments": len(transcript.segments),
        },
    )
    return transcript


def check_transcript_availability(
    video_url_or_id: str,
    config: Optional[PipelineConfig] = None,
    *,
    strategies: Optional[Sequence[Strategy]] = None,
    client: Optional[HttpClient] = None,
    cancel_event: Optional[threading.Event] = None,
    run_id: Optional[uuid.UUID | str] = None,
) -> Tuple[bool, str, int]:
    """
    Run the chain without title resolution.

    Returns:
        (has_transcript, message, segment_count)

    Raises:
        InvalidInput: the input is not a recognisable URL or ID
    """
    config = config or (client.config if client is not None else PipelineConfig())
    logger = get_logger(run_id or uuid.uuid4())
    video_id = _resolve_id(video_url_or_id, logger)

    owns_client = client is None
    client = client or HttpClient(config, cancel_event=cancel_event)
    if strategies is None:
        strategies = default_strategies(client, config)

    try:
        result = StrategyChain(strategies, logger).run(video_id)
    except NoTranscriptAvailable as exc:
        return False, describe_unavailable(exc), 0
    finally:
        if owns_client:
            client.close()

    return True, f"Transcript available via {result.strategy_id}", len(result.segments)


def describe_unavailable(error: NoTranscriptAvailable) -> str:
    """Human-readable reason, most specific cause first."""
    kinds = {kind.value for kind in error.kinds}
    if "disabled" in kinds:
        return "Transcripts are disabled for this video"
    if "rate_limited" in kinds:
        return "YouTube is rate limiting transcript requests; try again later"
    return "No transcript is available for this video"
