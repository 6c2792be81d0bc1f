# podpicker/transcripts/parsers/timedtext.py
"""
Timed-text XML parsing.

Handles the two shapes YouTube serves from /api/timedtext and caption baseUrls:
- classic:  <transcript><text start="1.5" dur="2.0">Hi</text></transcript>  (seconds)
- srv3:     <timedtext><body><p t="1500" d="2000">Hi</p></body></timedtext>  (milliseconds)

Regex based rather than a strict XML parser so one broken element never
costs the rest of the document.
"""

from __future__ import annotations

import html
import re
from typing import Dict, List, Optional
from urllib.parse import urlencode

from pydantic import ValidationError

from podpicker.transcripts.schema import CaptionTrack, TranscriptSegment


_TEXT_ELEMENT = re.compile(r"<text\b([^>]*?)(?:/>|>(.*?)</text>)", re.DOTALL | re.IGNORECASE)
_P_ELEMENT = re.compile(r"<p\b([^>]*?)(?:/>|>(.*?)</p>)", re.DOTALL | re.IGNORECASE)
_TRACK_ELEMENT = re.compile(r"<track\b([^>]*?)/?>", re.DOTALL | re.IGNORECASE)
_ATTRIBUTE = re.compile(r"([A-Za-z_:][\w:.-]*)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")
_INLINE_TAG = re.compile(r"<[^>]+>")
_FORMATTING_TAG = re.compile(r"</?(?:font|b|i|u|c|br)\b[^>]*>", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_TIMED_TEXT_ROOT = re.compile(r"<(?:transcript|timedtext)\b", re.IGNORECASE)

TIMEDTEXT_URL = "https://www.youtube.com/api/timedtext"


def _attributes(raw: str) -> Dict[str, str]:
    return {match.group(1): match.group(2) if match.group(2) is not None else match.group(3)
            for match in _ATTRIBUTE.finditer(raw)}


def decode_caption_text(raw: str) -> str:
    """Strip inline markup and decode entities, including double-encoded ones (&amp;#39;)."""
    text = _INLINE_TAG.sub("", raw)
    text = html.unescape(text)
    if "&" in text:
        text = html.unescape(text)
    # Escaped formatting markup only becomes visible after decoding
    text = _FORMATTING_TAG.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _segment(text: str, start: Optional[float], duration: Optional[float]) -> Optional[TranscriptSegment]:
    if not text or start is None:
        return None
    try:
        return TranscriptSegment(text=text, start=start, duration=duration if duration is not None else 0.0)
    except ValidationError:
        return None


def looks_like_timed_text(body: str) -> bool:
    """True when body is a timed-text document, even one with zero cues."""
    return bool(_TIMED_TEXT_ROOT.search(body))


def parse_timed_text(xml: str) -> List[TranscriptSegment]:
    """
    Parse a timed-text document into segments, in document order.

    Elements with missing/garbled start, negative values, or empty text after
    decoding are skipped. A missing dur is treated as 0.
    """
    segments: List[TranscriptSegment] = []

    for match in _TEXT_ELEMENT.finditer(xml):
        attrs = _attributes(match.group(1))
        segment = _segment(
            decode_caption_text(match.group(2) or ""),
            _to_float(attrs.get("start")),
            _to_float(attrs.get("dur")),
        )
        if segment is not None:
            segments.append(segment)

    if segments:
        return segments

    # srv3: t/d are integer milliseconds
    for match in _P_ELEMENT.finditer(xml):
        attrs = _attributes(match.group(1))
        start_ms = _to_float(attrs.get("t"))
        duration_ms = _to_float(attrs.get("d"))
        segment = _segment(
            decode_caption_text(match.group(2) or ""),
            start_ms / 1000 if start_ms is not None else None,
            duration_ms / 1000 if duration_ms is not None else None,
        )
        if segment is not None:
            segments.append(segment)

    return segments


def parse_track_listing(xml: str, video_id: str) -> List[CaptionTrack]:
    """
    Parse the ?type=list response of the timedtext endpoint.

    Each <track lang_code=".." name=".." kind="asr"/> becomes a CaptionTrack
    whose base_url points back at the timedtext endpoint for that track.
    Tracks without a lang_code are skipped.
    """
    tracks: List[CaptionTrack] = []
    for match in _TRACK_ELEMENT.finditer(xml):
        attrs = _attributes(match.group(1))
        language_code = (attrs.get("lang_code") or "").strip()
        if not language_code:
            continue
        name = html.unescape(attrs.get("name") or "")
        kind = attrs.get("kind") or None

        params = [("v", video_id), ("lang", language_code)]
        if name:
            params.append(("name", name))
        if kind:
            params.append(("kind", kind))
        tracks.append(
            CaptionTrack(
                base_url=f"{TIMEDTEXT_URL}?{urlencode(params)}",
                language_code=language_code,
                name=name or html.unescape(attrs.get("lang_original") or "") or None,
                kind=kind,
            )
        )
    return tracks
