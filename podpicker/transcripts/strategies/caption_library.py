# podpicker/transcripts/strategies/caption_library.py
"""
Strategy 3: youtube-transcript-api.

The library does its own watch-page and innertube requests, so it gets its
own requests.Session carrying our timeout, and the proxy through
GenericProxyConfig. Offsets: snippets are already in seconds.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

import requests
from pydantic import ValidationError
from youtube_transcript_api import YouTubeTranscriptApi
from youtube_transcript_api._errors import (
    CouldNotRetrieveTranscript,
    NoTranscriptFound,
    RequestBlocked,
    TranscriptsDisabled,
    VideoUnavailable,
)
from youtube_transcript_api.proxies import GenericProxyConfig

from podpicker.transcripts.errors import ExtractionError
from podpicker.transcripts.schema import CaptionPayload, FailureKind, TranscriptSegment
from podpicker.transcripts.strategies.base import ExtractionStrategy


class _TimeoutSession(requests.Session):
    """requests.Session that applies a default timeout to every request."""

    def __init__(self, timeout: float) -> None:
        super().__init__()
        self.timeout = timeout

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:  # type: ignore[override]
        kwargs.setdefault("timeout", self.timeout)
        return super().request(method, url, **kwargs)


class CaptionLibraryStrategy(ExtractionStrategy):
    id = "caption_library"

    def build_session(self) -> _TimeoutSession:
        session = _TimeoutSession(self.config.timeout_seconds)
        session.headers.update({"User-Agent": self.config.user_agent, "Accept-Language": "en-US,en;q=0.9"})
        return session

    def build_api(self, session: requests.Session) -> YouTubeTranscriptApi:
        proxy_config: Optional[GenericProxyConfig] = None
        if self.config.proxy is not None:
            proxy_config = GenericProxyConfig(http_url=self.config.proxy.url, https_url=self.config.proxy.url)
        return YouTubeTranscriptApi(proxy_config=proxy_config, http_client=session)

    def _extract(self, video_id: str) -> CaptionPayload:
        self.client.raise_if_cancelled()

        # One session per attempt, closed on every exit path
        with self.build_session() as session:
            return self._fetch(self.build_api(session), video_id)

    def _fetch(self, api: YouTubeTranscriptApi, video_id: str) -> CaptionPayload:
        try:
            transcript_list = api.list(video_id)
            try:
                transcript = transcript_list.find_transcript(list(self.config.languages))
            except NoTranscriptFound:
                available = list(transcript_list)
                if not available:
                    raise
                transcript = available[0]

            self.client.raise_if_cancelled()
            fetched = transcript.fetch()
        except TranscriptsDisabled as exc:
            raise ExtractionError(FailureKind.DISABLED, f"Transcripts are disabled for video {video_id}") from exc
        except (NoTranscriptFound, VideoUnavailable) as exc:
            raise ExtractionError(FailureKind.NOT_FOUND, f"No transcript for video {video_id}: {type(exc).__name__}") from exc
        except RequestBlocked as exc:
            raise ExtractionError(FailureKind.RATE_LIMITED, "YouTube blocked the caption library's requests") from exc
        except CouldNotRetrieveTranscript as exc:
            raise ExtractionError(FailureKind.NETWORK_ERROR, f"Caption library failed: {type(exc).__name__}") from exc
        except requests.RequestException as exc:
            raise ExtractionError(FailureKind.NETWORK_ERROR, f"Caption library request failed: {type(exc).__name__}") from exc

        return CaptionPayload(
            segments=tuple(segments_from_snippets(fetched)),
            language=transcript.language_code,
        )


def segments_from_snippets(snippets: Sequence[Any]) -> List[TranscriptSegment]:
    """Convert library snippets (objects with text/start/duration) to segments, dropping unusable ones."""
    segments: List[TranscriptSegment] = []
    for snippet in snippets:
        try:
            segments.append(
                TranscriptSegment(
                    text=snippet.text,
                    start=snippet.start,
                    duration=snippet.duration,
                )
            )
        except (ValidationError, AttributeError):
            continue
    return segments
