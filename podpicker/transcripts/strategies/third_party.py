# podpicker/transcripts/strategies/third_party.py
"""
Strategy 4: an external transcript service, selected by configuration.

Providers:
- rapidapi: GET https://{host}/transcript?video_id=ID. Offsets in seconds.
- custom: POST {"videoId", "platform": "youtube"} to a user endpoint.
  Either a "transcript" list (seconds) or an "srt" document.
- assemblyai: resolve the audio stream with yt-dlp, submit it, poll until
  completed or error. Word offsets are milliseconds, converted here.

Every response is validated against a provider schema; drift is a
PARSE_ERROR and an "error" field in the body is NOT_FOUND. A provider with
no key or URL reports NOT_CONFIGURED without touching the network.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar

import yt_dlp
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from podpicker.transcripts.errors import ExtractionError
from podpicker.transcripts.parsers.srt import parse_srt
from podpicker.transcripts.schema import CaptionPayload, FailureKind, TranscriptSegment
from podpicker.transcripts.strategies.base import ExtractionStrategy


ASSEMBLYAI_BASE_URL = "https://api.assemblyai.com/v2"

ModelT = TypeVar("ModelT", bound=BaseModel)


# ---------------------------------------------------------------------------
# Provider response schemas
# ---------------------------------------------------------------------------

class ServiceSegment(BaseModel):
    # A missing or negative start fails validation (PARSE_ERROR) rather than
    # stamping the segment at zero
    text: str
    start: float = Field(..., ge=0)
    duration: float = Field(default=0.0, ge=0)

    model_config = ConfigDict(extra="ignore")


class RapidApiResponse(BaseModel):
    transcript: List[ServiceSegment] = Field(default_factory=list)
    title: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class CustomApiResponse(BaseModel):
    transcript: Optional[List[ServiceSegment]] = None
    srt: Optional[str] = None
    title: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class AssemblyAISubmitResponse(BaseModel):
    id: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="ignore")


class AssemblyAIWord(BaseModel):
    text: str
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)

    model_config = ConfigDict(extra="ignore")


class AssemblyAITranscript(BaseModel):
    id: str
    status: str
    error: Optional[str] = None
    words: Optional[List[AssemblyAIWord]] = None

    model_config = ConfigDict(extra="ignore")


def validate_response(model: Type[ModelT], data: Any, provider: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ExtractionError(
            FailureKind.PARSE_ERROR,
            f"Unexpected {provider} response shape ({exc.error_count()} validation errors)",
        ) from exc


def segments_from_service(items: List[ServiceSegment]) -> Tuple[TranscriptSegment, ...]:
    segments: List[TranscriptSegment] = []
    for item in items:
        try:
            segments.append(TranscriptSegment(text=item.text, start=item.start, duration=item.duration))
        except ValidationError:
            continue
    return tuple(segments)


def segments_from_words(words: List[AssemblyAIWord]) -> Tuple[TranscriptSegment, ...]:
    segments: List[TranscriptSegment] = []
    for word in words:
        if word.end < word.start:
            continue
        try:
            segments.append(
                TranscriptSegment(
                    text=word.text,
                    start=word.start / 1000,
                    duration=(word.end - word.start) / 1000,
                )
            )
        except ValidationError:
            continue
    return tuple(segments)


class ThirdPartyServiceStrategy(ExtractionStrategy):
    id = "third_party"

    @property
    def provider(self) -> str:
        return self.config.third_party.provider

    def _extract(self, video_id: str) -> CaptionPayload:
        handlers: Dict[str, Callable[[str], CaptionPayload]] = {
            "rapidapi": self._fetch_rapidapi,
            "custom": self._fetch_custom,
            "assemblyai": self._fetch_assemblyai,
        }
        return handlers[self.provider](video_id)

    # rapidapi

    def _fetch_rapidapi(self, video_id: str) -> CaptionPayload:
        settings = self.config.third_party
        if not settings.rapidapi_key:
            raise ExtractionError(FailureKind.NOT_CONFIGURED, "RAPIDAPI_KEY is not set")

        data = self.client.get_json(
            f"https://{settings.rapidapi_host}/transcript",
            params={"video_id": video_id},
            headers={
                "X-RapidAPI-Key": settings.rapidapi_key,
                "X-RapidAPI-Host": settings.rapidapi_host,
            },
        )
        response = validate_response(RapidApiResponse, data, "rapidapi")
        if response.error:
            raise ExtractionError(FailureKind.NOT_FOUND, f"rapidapi: {response.error}")

        return CaptionPayload(segments=segments_from_service(response.transcript), title=response.title)

    # custom

    def _fetch_custom(self, video_id: str) -> CaptionPayload:
        settings = self.config.third_party
        if not settings.custom_api_url:
            raise ExtractionError(FailureKind.NOT_CONFIGURED, "CUSTOM_TRANSCRIPT_API_URL is not set")

        headers = {}
        if settings.custom_api_key:
            headers["Authorization"] = f"Bearer {settings.custom_api_key}"

        data = self.client.post_json(
            settings.custom_api_url,
            {"videoId": video_id, "platform": "youtube"},
            headers=headers,
        )
        response = validate_response(CustomApiResponse, data, "custom")
        if response.error:
            raise ExtractionError(FailureKind.NOT_FOUND, f"custom: {response.error}")

        if response.transcript is not None:
            segments = segments_from_service(response.transcript)
        elif response.srt is not None:
            segments = tuple(parse_srt(response.srt))
        else:
            raise ExtractionError(FailureKind.PARSE_ERROR, "custom: response has neither 'transcript' nor 'srt'")

        return CaptionPayload(segments=segments, title=response.title)

    # assemblyai

    def resolve_audio_url(self, video_id: str) -> str:
        """Ask yt-dlp for a direct audio stream URL without downloading anything."""
        params: Dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "noplaylist": True,
            "format": "bestaudio/best",
            "socket_timeout": self.config.timeout_seconds,
        }
        if self.config.proxy is not None:
            params["proxy"] = self.config.proxy.url

        try:
            with yt_dlp.YoutubeDL(params) as ydl:
                info = ydl.extract_info(f"https://www.youtube.com/watch?v={video_id}", download=False)
        except yt_dlp.DownloadError as exc:
            kind = FailureKind.NOT_FOUND if "unavailable" in str(exc).lower() else FailureKind.NETWORK_ERROR
            raise ExtractionError(kind, f"yt-dlp could not resolve audio for {video_id}") from exc

        url = (info or {}).get("url")
        if not url:
            raise ExtractionError(FailureKind.NOT_FOUND, f"No audio stream for video {video_id}")
        return url

    def _fetch_assemblyai(self, video_id: str) -> CaptionPayload:
        settings = self.config.third_party
        if not settings.assemblyai_api_key:
            raise ExtractionError(FailureKind.NOT_CONFIGURED, "ASSEMBLYAI_API_KEY is not set")

        auth = {"Authorization": settings.assemblyai_api_key}
        audio_url = self.resolve_audio_url(video_id)
        language = self.config.languages[0].split("-")[0]

        submitted = validate_response(
            AssemblyAISubmitResponse,
            self.client.post_json(
                f"{ASSEMBLYAI_BASE_URL}/transcript",
                {"audio_url": audio_url, "language_code": language},
                headers=auth,
            ),
            "assemblyai",
        )

        for _ in range(settings.max_poll_attempts):
            self._wait(settings.poll_interval_seconds)
            status = validate_response(
                AssemblyAITranscript,
                self.client.get_json(f"{ASSEMBLYAI_BASE_URL}/transcript/{submitted.id}", headers=auth),
                "assemblyai",
            )
            if status.status == "completed":
                return CaptionPayload(segments=segments_from_words(status.words or []), language=language)
            if status.status == "error":
                raise ExtractionError(FailureKind.NOT_FOUND, f"assemblyai: {status.error or 'transcription failed'}")

        raise ExtractionError(
            FailureKind.NETWORK_ERROR,
            f"assemblyai: transcription not completed after {settings.max_poll_attempts} polls",
        )

    def _wait(self, seconds: float) -> None:
        if seconds > 0:
            if self.client.cancel_event is not None:
                self.client.cancel_event.wait(seconds)
            else:
                time.sleep(seconds)
        self.client.raise_if_cancelled()
