# podpicker/transcripts/responses.py
"""
(status, body) mapping for the web layer that serves transcripts.

Both helpers always return a JSON-serializable body and never raise, except
ExtractionCancelled, which belongs to whoever set the cancel event.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Tuple

from podpicker.logging_core.logger import get_logger, log_event
from podpicker.transcripts.assembler import check_transcript_availability, describe_unavailable, get_transcript
from podpicker.transcripts.errors import ExtractionCancelled, InvalidInput, NoTranscriptAvailable
from podpicker.transcripts.resolver import resolve_video_id


Response = Tuple[int, Dict[str, Any]]


def _unexpected(exc: Exception, run_id: str, component: str) -> Response:
    log_event(
        get_logger(run_id),
        logging.ERROR,
        "Unexpected error while serving request",
        component=component,
        event_type="failure",
        metadata={"exception": f"{type(exc).__name__}: {exc}"},
    )
    return 500, {"error": "Failed to fetch transcript", "details": str(exc)}


def transcript_response(url_or_id: str, **kwargs: Any) -> Response:
    """
    200 with the wire contract, 400 for bad input, 404 when no strategy
    produced a transcript, 500 for anything else.
    """
    run_id = str(kwargs.pop("run_id", None) or uuid.uuid4())
    try:
        transcript = get_transcript(url_or_id, run_id=run_id, **kwargs)
    except InvalidInput as exc:
        return 400, {"error": "Invalid YouTube URL or video ID", "details": exc.reason}
    except NoTranscriptAvailable as exc:
        return 404, {
            "error": describe_unavailable(exc),
            "videoId": exc.video_id,
            "failures": [
                {"strategy": f.source_strategy, "kind": f.kind.value, "message": f.message}
                for f in exc.failures
            ],
        }
    except ExtractionCancelled:
        raise
    except Exception as exc:  # pylint: disable=broad-except
        return _unexpected(exc, run_id, "responses.transcript")

    return 200, transcript.to_wire()


def availability_response(url_or_id: str, **kwargs: Any) -> Response:
    """200 with {hasTranscript, message, videoId, transcriptCount}; 400 for bad input; 500 otherwise."""
    run_id = str(kwargs.pop("run_id", None) or uuid.uuid4())
    try:
        video_id = resolve_video_id(url_or_id)
        has_transcript, message, count = check_transcript_availability(video_id, run_id=run_id, **kwargs)
    except InvalidInput as exc:
        return 400, {
            "error": "Invalid video ID format",
            "hasTranscript": False,
            "message": exc.reason,
        }
    except ExtractionCancelled:
        raise
    except Exception as exc:  # pylint: disable=broad-except
        return _unexpected(exc, run_id, "responses.availability")

    return 200, {
        "hasTranscript": has_transcript,
        "message": message,
        "videoId": video_id,
        "transcriptCount": count,
    }
