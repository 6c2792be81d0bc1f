"""Transcript extraction strategies, in the order the default chain runs them."""

from podpicker.transcripts.strategies.base import (
    SUGGESTED_FIXES,
    ExtractionStrategy,
    Strategy,
    failure_result,
    timer,
)
from podpicker.transcripts.strategies.caption_library import CaptionLibraryStrategy
from podpicker.transcripts.strategies.direct_timedtext import DirectTimedTextStrategy
from podpicker.transcripts.strategies.third_party import ThirdPartyServiceStrategy
from podpicker.transcripts.strategies.watch_page import WatchPageTrackListStrategy

__all__ = [
    "SUGGESTED_FIXES",
    "CaptionLibraryStrategy",
    "DirectTimedTextStrategy",
    "ExtractionStrategy",
    "Strategy",
    "ThirdPartyServiceStrategy",
    "WatchPageTrackListStrategy",
    "failure_result",
    "timer",
]
