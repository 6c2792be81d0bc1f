# podpicker/transcripts/schema.py
"""
Authoritative data contracts for the transcript pipeline.

This module defines:
- The Transcript value returned to callers (and its JSON wire shape)
- The per-strategy result contract (StrategyResult) and failure taxonomy
- Upstream schemas validated at the parse boundary (CaptionTrack)

All other modules MUST conform to these contracts.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Sequence, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)


VIDEO_ID_PATTERN = r"^[A-Za-z0-9_-]{11}$"
VIDEO_ID_RE = re.compile(VIDEO_ID_PATTERN)

VideoId = Annotated[str, StringConstraints(pattern=VIDEO_ID_PATTERN)]


class FailureKind(str, Enum):
    """Typed failure categories for machine-parsable diagnostics."""
    NOT_FOUND = "not_found"
    DISABLED = "disabled"
    RATE_LIMITED = "rate_limited"
    PARSE_ERROR = "parse_error"
    NETWORK_ERROR = "network_error"
    NOT_CONFIGURED = "not_configured"


class TranscriptSegment(BaseModel):
    """One timed caption line. Offsets are always seconds."""
    text: str = Field(..., min_length=1)
    start: float = Field(..., ge=0)
    duration: float = Field(..., ge=0)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, allow_inf_nan=False)


def join_segment_text(segments: Sequence[TranscriptSegment]) -> str:
    return " ".join(segment.text for segment in segments)


class Transcript(BaseModel):
    """
    Final pipeline output.

    Serialized with to_wire() into the JSON contract consumed by the web layer:
    {"videoId", "title", "segments": [{"text", "start", "duration"}], "fullText"}.
    source_strategy and language are diagnostics only and never leave the process.
    """
    video_id: VideoId = Field(..., alias="videoId")
    title: str
    segments: Tuple[TranscriptSegment, ...]
    full_text: str = Field(..., alias="fullText")
    source_strategy: Optional[str] = Field(default=None, exclude=True)
    language: Optional[str] = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="after")
    def validate_full_text(self) -> "Transcript":
        if not self.segments:
            raise ValueError("A transcript needs at least one segment")
        if self.full_text != join_segment_text(self.segments):
            raise ValueError("full_text must equal the space-joined segment texts")
        return self

    @classmethod
    def assemble(
        cls,
        video_id: str,
        title: str,
        segments: Sequence[TranscriptSegment],
        *,
        source_strategy: Optional[str] = None,
        language: Optional[str] = None,
    ) -> "Transcript":
        return cls(
            video_id=video_id,
            title=title,
            segments=tuple(segments),
            full_text=join_segment_text(segments),
            source_strategy=source_strategy,
            language=language,
        )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ExtractionFailure(BaseModel):
    """Structured representation of one strategy's failure."""
    kind: FailureKind
    message: str
    source_strategy: str
    suggested_fixes: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class CaptionTrack(BaseModel):
    """
    One caption track as advertised by YouTube.

    Validated from the watch page's embedded JSON (camelCase keys) or built
    from the timedtext listing. Unexpected shapes fail validation and are
    reported as parse errors upstream.
    """
    base_url: str = Field(..., alias="baseUrl", min_length=1)
    language_code: str = Field(..., alias="languageCode", min_length=1)
    name: Optional[str] = None
    kind: Optional[str] = None

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("name", mode="before")
    @classmethod
    def flatten_name(cls, v: Any) -> Optional[str]:
        """Upstream names arrive as {"simpleText": ...} or {"runs": [{"text": ...}]}."""
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, dict):
            if "simpleText" in v:
                return str(v["simpleText"])
            runs = v.get("runs")
            if isinstance(runs, list):
                return "".join(str(run.get("text", "")) for run in runs if isinstance(run, dict))
        raise ValueError(f"Unrecognised caption track name: {v!r}")

    @property
    def is_generated(self) -> bool:
        return self.kind == "asr"


class CaptionPayload(BaseModel):
    """What a strategy produces when it succeeds."""
    segments: Tuple[TranscriptSegment, ...] = ()
    language: Optional[str] = None
    title: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class StrategyResult(BaseModel):
    """
    Standardized record of one strategy attempt.

    success is True only when segments is non-empty and failure is None.
    """
    strategy_id: str
    success: bool
    segments: Tuple[TranscriptSegment, ...] = ()
    language: Optional[str] = None
    title: Optional[str] = None
    failure: Optional[ExtractionFailure] = None
    execution_time_ms: Optional[float] = None

    model_config = ConfigDict(frozen=True)
