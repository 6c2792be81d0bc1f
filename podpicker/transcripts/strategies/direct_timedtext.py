# podpicker/transcripts/strategies/direct_timedtext.py
"""
Strategy 1: YouTube's timedtext endpoint, queried directly.

Two requests: ?type=list&v=ID for the track listing, then the chosen
track's text. Offsets: classic timedtext XML is in seconds; the srv3 variant
is milliseconds and is converted by the parser.
"""

from __future__ import annotations

from podpicker.transcripts.errors import ExtractionError
from podpicker.transcripts.parsers.timedtext import TIMEDTEXT_URL, parse_track_listing
from podpicker.transcripts.parsers.track_list import select_track
from podpicker.transcripts.schema import CaptionPayload, FailureKind
from podpicker.transcripts.strategies.base import ExtractionStrategy, segments_from_timed_text


class DirectTimedTextStrategy(ExtractionStrategy):
    id = "direct_timedtext"

    def _extract(self, video_id: str) -> CaptionPayload:
        listing = self.client.get_text(TIMEDTEXT_URL, params={"type": "list", "v": video_id})
        tracks = parse_track_listing(listing, video_id)

        if not tracks:
            if listing.strip() and "<transcript_list" not in listing:
                raise ExtractionError(FailureKind.PARSE_ERROR, "Track listing is not a transcript_list document")
            raise ExtractionError(FailureKind.NOT_FOUND, "Timedtext listing has no tracks")

        track = select_track(tracks, self.config.languages)
        body = self.client.get_text(track.base_url)

        return CaptionPayload(
            segments=segments_from_timed_text(body),
            language=track.language_code,
        )
