# podpicker/transcripts/resolver.py
"""
URL/ID resolution.

Responsibility:
- Accept a watch URL, short URL, embed-style URL, or a bare 11-char ID
- Return the canonical video ID

Pure and deterministic: no network, no logging side effects.
"""

from __future__ import annotations

import re
from typing import List, Pattern

from podpicker.transcripts.errors import InvalidInput
from podpicker.transcripts.schema import VIDEO_ID_RE


_ID_CAPTURE = r"([^\"&?#/\s]+)"
_YOUTUBE_HOST = r"(?:https?://)?(?:[\w-]+\.)?(?:youtube\.com|youtube-nocookie\.com)"

# Ordered: first match wins, then its capture must pass the ID-shape check.
PATTERNS: List[Pattern[str]] = [
    re.compile(r"^([A-Za-z0-9_-]{11})$"),
    re.compile(_YOUTUBE_HOST + r"/watch/?\?(?:[^#]*&)?v=" + _ID_CAPTURE, re.IGNORECASE),
    re.compile(r"(?:https?://)?(?:www\.)?youtu\.be/" + _ID_CAPTURE, re.IGNORECASE),
    re.compile(_YOUTUBE_HOST + r"/(?:embed|v|e|shorts|live)/" + _ID_CAPTURE, re.IGNORECASE),
]


def is_valid_video_id(value: str) -> bool:
    return isinstance(value, str) and VIDEO_ID_RE.fullmatch(value) is not None


def resolve_video_id(value: str) -> str:
    """
    Resolve a YouTube URL or bare ID to its 11-character video ID.

    Raises:
        InvalidInput: If no pattern matches, or the matched ID is malformed
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(str(value), "Empty YouTube URL or video ID")

    candidate = value.strip()
    for pattern in PATTERNS:
        match = pattern.search(candidate)
        if not match:
            continue
        video_id = match.group(1)
        if not is_valid_video_id(video_id):
            raise InvalidInput(value, f"Malformed video ID {video_id!r}")
        return video_id

    raise InvalidInput(value)
