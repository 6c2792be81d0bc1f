# podpicker/transcripts/parsers/track_list.py
"""
Caption-track list extraction from watch-page HTML, and track selection.

The watch page embeds ytInitialPlayerResponse as a JS literal. Somewhere in
it sits "captionTracks": [ {...}, ... ]. We locate the key, then scan
brackets (string-aware, so braces inside URLs or names don't count) to find
the matching close. If the scan never closes we fall back to cutting at the
next top-level key (`],"someKey":`). Whatever still fails to decode is a
parse error; no further heuristics are attempted.
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from podpicker.transcripts.errors import ExtractionError
from podpicker.transcripts.schema import CaptionTrack, FailureKind


CAPTION_TRACKS_KEY = '"captionTracks"'

_OPENERS = {"[": "]", "{": "}"}
_NEXT_TOP_LEVEL_KEY = re.compile(r'\]\s*,\s*"[A-Za-z_][\w]*"\s*:')


def _balanced_end(text: str, open_index: int) -> Optional[int]:
    """Return the index just past the bracket matching text[open_index], or None."""
    stack: List[str] = []
    in_string = False
    escaped = False

    for index in range(open_index, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in _OPENERS:
            stack.append(_OPENERS[char])
        elif char in ("]", "}"):
            if not stack or stack.pop() != char:
                return None
            if not stack:
                return index + 1
    return None


def _next_key_end(text: str, open_index: int) -> Optional[int]:
    match = _NEXT_TOP_LEVEL_KEY.search(text, open_index)
    return match.start() + 1 if match else None


def _locate_value(html: str) -> int:
    key_index = html.find(CAPTION_TRACKS_KEY)
    if key_index == -1:
        raise ExtractionError(FailureKind.PARSE_ERROR, "No captionTracks key in page")

    cursor = key_index + len(CAPTION_TRACKS_KEY)
    while cursor < len(html) and html[cursor] in " \t\r\n:":
        cursor += 1
    if cursor >= len(html) or html[cursor] not in _OPENERS:
        raise ExtractionError(FailureKind.PARSE_ERROR, "captionTracks is not followed by a JSON array")
    return cursor


def _decode(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ExtractionError(FailureKind.PARSE_ERROR, f"captionTracks JSON did not decode: {exc.msg}") from exc


def extract_caption_tracks(html: str) -> List[CaptionTrack]:
    """
    Extract and validate the embedded captionTracks array.

    Returns an empty list when the array is present but empty.

    Raises:
        ExtractionError: PARSE_ERROR when the key is missing, the array cannot
            be delimited or decoded, or any track fails schema validation
    """
    start = _locate_value(html)
    end = _balanced_end(html, start)
    if end is None:
        end = _next_key_end(html, start)
    if end is None:
        raise ExtractionError(FailureKind.PARSE_ERROR, "Could not find the end of captionTracks")

    raw_tracks = _decode(html[start:end])
    if not isinstance(raw_tracks, list):
        raise ExtractionError(FailureKind.PARSE_ERROR, f"captionTracks is a {type(raw_tracks).__name__}, expected a list")

    try:
        return [CaptionTrack.model_validate(track) for track in raw_tracks]
    except ValidationError as exc:
        raise ExtractionError(
            FailureKind.PARSE_ERROR,
            f"captionTracks entry did not match the expected shape ({exc.error_count()} errors)",
        ) from exc


def select_track(tracks: Sequence[CaptionTrack], languages: Sequence[str] = ("en", "en-US", "en-GB")) -> CaptionTrack:
    """
    Pick the track to fetch.

    Walks the language preference in order (manual tracks beat auto-generated
    ones for the same language) and falls back to the first track available.

    Raises:
        ExtractionError: NOT_FOUND when there are no tracks at all
    """
    if not tracks:
        raise ExtractionError(FailureKind.NOT_FOUND, "No caption tracks available")

    for code in languages:
        matches = [track for track in tracks if track.language_code.lower() == code.lower()]
        if matches:
            manual = [track for track in matches if not track.is_generated]
            return (manual or matches)[0]

    return tracks[0]
