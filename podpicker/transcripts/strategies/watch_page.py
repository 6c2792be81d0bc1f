# podpicker/transcripts/strategies/watch_page.py
"""
Strategy 2: caption tracks embedded in the watch page.

Fetches /watch?v=ID, classifies the page (bot wall, unavailable video,
captions disabled), pulls the captionTracks array out of the inline player
response, then fetches and parses the selected track's baseUrl.
Offsets: the track body is timed-text XML in seconds (srv3 in ms, converted
by the parser).
"""

from __future__ import annotations

from urllib.parse import urljoin

from podpicker.transcripts.errors import ExtractionError
from podpicker.transcripts.parsers.track_list import CAPTION_TRACKS_KEY, extract_caption_tracks, select_track
from podpicker.transcripts.schema import CaptionPayload, FailureKind
from podpicker.transcripts.strategies.base import ExtractionStrategy, segments_from_timed_text
from podpicker.transcripts.title import WATCH_URL, parse_title


RECAPTCHA_MARKER = 'class="g-recaptcha"'
CAPTIONS_MARKER = '"captions":'
PLAYABILITY_MARKER = '"playabilityStatus":'


def classify_watch_page(html: str, video_id: str) -> None:
    """
    Raise the right ExtractionError when the page cannot carry caption tracks.

    Raises:
        ExtractionError: RATE_LIMITED on a captcha page, NOT_FOUND when the
            video is unavailable, DISABLED when captions are switched off
    """
    if CAPTIONS_MARKER in html and CAPTION_TRACKS_KEY in html:
        return
    if RECAPTCHA_MARKER in html:
        raise ExtractionError(FailureKind.RATE_LIMITED, "YouTube answered with a captcha page")
    if PLAYABILITY_MARKER not in html:
        raise ExtractionError(FailureKind.NOT_FOUND, f"Video {video_id} is unavailable")
    raise ExtractionError(FailureKind.DISABLED, f"Transcripts are disabled for video {video_id}")


class WatchPageTrackListStrategy(ExtractionStrategy):
    id = "watch_page"

    def _extract(self, video_id: str) -> CaptionPayload:
        html = self.client.get_text(WATCH_URL, params={"v": video_id})
        classify_watch_page(html, video_id)

        tracks = extract_caption_tracks(html)
        track = select_track(tracks, self.config.languages)
        body = self.client.get_text(urljoin("https://www.youtube.com/", track.base_url))

        return CaptionPayload(
            segments=segments_from_timed_text(body),
            language=track.language_code,
            title=parse_title(html),
        )
