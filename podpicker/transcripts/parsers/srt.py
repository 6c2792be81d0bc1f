# podpicker/transcripts/parsers/srt.py
"""SubRip (SRT) parsing into seconds-based segments."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from pydantic import ValidationError

from podpicker.transcripts.schema import TranscriptSegment


_BLOCK_SPLIT = re.compile(r"\n\s*\n")
_TIMESTAMP_LINE = re.compile(
    r"(\d{1,2}):(\d{2}):(\d{2})[,.](\d{1,3})\s*-->\s*(\d{1,2}):(\d{2}):(\d{2})[,.](\d{1,3})"
)


def _seconds(hours: str, minutes: str, seconds: str, millis: str) -> float:
    # "5" in the millisecond slot means 500ms, as in "00:00:01,5"
    return int(hours) * 3600 + int(minutes) * 60 + int(seconds) + int(millis.ljust(3, "0")) / 1000


def _parse_block(block: str) -> Optional[Tuple[float, float, str]]:
    lines = [line.strip() for line in block.strip().split("\n")]
    for index, line in enumerate(lines):
        match = _TIMESTAMP_LINE.search(line)
        if not match:
            continue
        text = " ".join(part for part in lines[index + 1:] if part)
        start = _seconds(*match.groups()[:4])
        end = _seconds(*match.groups()[4:])
        return start, end, text
    return None


def parse_srt(content: str) -> List[TranscriptSegment]:
    """
    Parse SRT content.

    Each blank-line-delimited block is: sequence number (ignored), a
    "HH:MM:SS,mmm --> HH:MM:SS,mmm" line, then one or more text lines joined
    by a space. duration = end - start. Blocks without a timestamp line, with
    empty text, or where end precedes start are skipped.
    """
    normalized = content.replace("\r\n", "\n").replace("\r", "\n").lstrip("\ufeff")
    segments: List[TranscriptSegment] = []

    for block in _BLOCK_SPLIT.split(normalized.strip()):
        parsed = _parse_block(block)
        if parsed is None:
            continue
        start, end, text = parsed
        if end < start:
            continue
        try:
            segments.append(TranscriptSegment(text=text, start=start, duration=round(end - start, 3)))
        except ValidationError:
            continue

    return segments
