"""Format-specific payload parsers. All offsets they emit are seconds."""

from podpicker.transcripts.parsers.srt import parse_srt
from podpicker.transcripts.parsers.timedtext import (
    decode_caption_text,
    looks_like_timed_text,
    parse_timed_text,
    parse_track_listing,
)
from podpicker.transcripts.parsers.track_list import extract_caption_tracks, select_track

__all__ = [
    "decode_caption_text",
    "extract_caption_tracks",
    "looks_like_timed_text",
    "parse_srt",
    "parse_timed_text",
    "parse_track_listing",
    "select_track",
]
