"""
YouTube transcript extraction.

Public surface:
- get_transcript / check_transcript_availability
- transcript_response / availability_response for the web layer
- resolve_video_id
- the Transcript model, PipelineConfig, and the caller-facing errors
"""

from podpicker.transcripts.assembler import check_transcript_availability, get_transcript
from podpicker.transcripts.chain import StrategyChain, default_strategies, extract_transcript
from podpicker.transcripts.config import PipelineConfig, ProxyConfig, ThirdPartyConfig
from podpicker.transcripts.errors import (
    ExtractionCancelled,
    ExtractionError,
    InvalidInput,
    NoTranscriptAvailable,
    TranscriptError,
)
from podpicker.transcripts.resolver import is_valid_video_id, resolve_video_id
from podpicker.transcripts.responses import availability_response, transcript_response
from podpicker.transcripts.schema import (
    ExtractionFailure,
    FailureKind,
    StrategyResult,
    Transcript,
    TranscriptSegment,
)

__all__ = [
    "ExtractionCancelled",
    "ExtractionError",
    "ExtractionFailure",
    "FailureKind",
    "InvalidInput",
    "NoTranscriptAvailable",
    "PipelineConfig",
    "ProxyConfig",
    "StrategyChain",
    "StrategyResult",
    "ThirdPartyConfig",
    "Transcript",
    "TranscriptError",
    "TranscriptSegment",
    "availability_response",
    "check_transcript_availability",
    "default_strategies",
    "extract_transcript",
    "get_transcript",
    "is_valid_video_id",
    "resolve_video_id",
    "transcript_response",
]
