import pytest

from podpicker.transcripts.errors import ExtractionError
from podpicker.transcripts.parsers import (
    decode_caption_text,
    extract_caption_tracks,
    looks_like_timed_text,
    parse_srt,
    parse_timed_text,
    parse_track_listing,
    select_track,
)
from podpicker.transcripts.schema import CaptionTrack, FailureKind

from fakes import TRACK_URL, VIDEO_ID, WATCH_PAGE


# ---------------------------------------------------------------------------
# timed text
# ---------------------------------------------------------------------------

def test_timed_text_decodes_entities_and_drops_empty_elements():
    xml = '<transcript><text start="1.5" dur="2.0">Tom &amp; Jerry</text><text start="3.5" dur="1"></text></transcript>'
    segments = parse_timed_text(xml)

    assert len(segments) == 1
    assert segments[0].text == "Tom & Jerry"
    assert segments[0].start == 1.5
    assert segments[0].duration == 2.0


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("it&#39;s", "it's"),
        ("&quot;quoted&quot;", '"quoted"'),
        ("a &lt; b &gt; c", "a < b > c"),
        ("it&amp;#39;s", "it's"),
        ("<font color=\"#E5E5E5\">hi</font> there", "hi there"),
        ("&lt;i&gt;emphasis&lt;/i&gt;", "emphasis"),
        ("line one\nline   two", "line one line two"),
    ],
)
def test_decode_caption_text(raw, expected):
    assert decode_caption_text(raw) == expected


def test_timed_text_missing_dur_defaults_to_zero():
    segments = parse_timed_text('<transcript><text start="4.2">no duration</text></transcript>')
    assert segments[0].duration == 0.0


def test_timed_text_skips_garbled_elements_without_failing():
    xml = (
        "<transcript>"
        '<text start="abc" dur="1">bad start</text>'
        '<text start="-1" dur="1">negative</text>'
        '<text start="2" dur="1">kept</text>'
        "</transcript>"
    )
    assert [s.text for s in parse_timed_text(xml)] == ["kept"]


def test_srv3_offsets_are_converted_from_milliseconds():
    xml = '<timedtext format="3"><body><p t="1500" d="2000">Hello</p><p t="3500" d="500"></p></body></timedtext>'
    segments = parse_timed_text(xml)

    assert len(segments) == 1
    assert segments[0].start == 1.5
    assert segments[0].duration == 2.0


def test_looks_like_timed_text():
    assert looks_like_timed_text("<transcript></transcript>")
    assert looks_like_timed_text('<?xml version="1.0"?><timedtext format="3"></timedtext>')
    assert not looks_like_timed_text("<html><body>Sorry</body></html>")


def test_track_listing_builds_timedtext_urls():
    xml = (
        "<transcript_list>"
        '<track id="0" name="" lang_code="en" lang_original="English"/>'
        '<track id="1" name="Auto" lang_code="de" kind="asr"/>'
        '<track id="2" name="no lang"/>'
        "</transcript_list>"
    )
    tracks = parse_track_listing(xml, VIDEO_ID)

    assert [t.language_code for t in tracks] == ["en", "de"]
    assert tracks[0].base_url == TRACK_URL
    assert tracks[0].name == "English"
    assert tracks[1].is_generated
    assert "kind=asr" in tracks[1].base_url
    assert "name=Auto" in tracks[1].base_url


# ---------------------------------------------------------------------------
# caption track list
# ---------------------------------------------------------------------------

def test_extract_caption_tracks_from_watch_page():
    tracks = extract_caption_tracks(WATCH_PAGE)

    assert len(tracks) == 1
    assert tracks[0].base_url == TRACK_URL
    assert tracks[0].language_code == "en"
    assert tracks[0].name == "English {auto} [x]"
    assert tracks[0].is_generated


def test_extract_caption_tracks_flattens_runs_names():
    html = '"captionTracks":[{"baseUrl":"/api/timedtext?v=x","name":{"runs":[{"text":"Eng"},{"text":"lish"}]},"languageCode":"en"}],"x":1'
    assert extract_caption_tracks(html)[0].name == "English"


def test_extract_caption_tracks_empty_array():
    assert extract_caption_tracks('{"captions":{"captionTracks": []}}') == []


def test_extract_caption_tracks_missing_key_is_parse_error():
    with pytest.raises(ExtractionError) as excinfo:
        extract_caption_tracks("<html>nothing here</html>")
    assert excinfo.value.kind is FailureKind.PARSE_ERROR


def test_extract_caption_tracks_unbalanced_and_undecodable_is_parse_error():
    # The stray "}" breaks bracket balancing; the next-key cut still yields invalid JSON
    html = '"captionTracks":[{"baseUrl":"u","languageCode":"en"}}],"audioTracks":[]'
    with pytest.raises(ExtractionError) as excinfo:
        extract_caption_tracks(html)
    assert excinfo.value.kind is FailureKind.PARSE_ERROR


def test_extract_caption_tracks_truncated_is_parse_error():
    with pytest.raises(ExtractionError) as excinfo:
        extract_caption_tracks('"captionTracks":[{"baseUrl":"u","languageCode":"en"')
    assert excinfo.value.kind is FailureKind.PARSE_ERROR


def test_extract_caption_tracks_schema_drift_is_parse_error():
    html = '"captionTracks":[{"url":"u","lang":"en"}],"audioTracks":[]'
    with pytest.raises(ExtractionError) as excinfo:
        extract_caption_tracks(html)
    assert excinfo.value.kind is FailureKind.PARSE_ERROR


def _track(code, kind=None):
    return CaptionTrack(base_url=f"https://example.test/{code}/{kind}", language_code=code, kind=kind)


def test_select_track_prefers_language_order():
    tracks = [_track("de"), _track("en-GB"), _track("en")]
    assert select_track(tracks, ("en", "en-US", "en-GB")).language_code == "en"


def test_select_track_prefers_manual_over_generated():
    tracks = [_track("en", "asr"), _track("en")]
    assert not select_track(tracks, ("en",)).is_generated


def test_select_track_falls_back_to_first():
    tracks = [_track("fr"), _track("de")]
    assert select_track(tracks, ("en",)).language_code == "fr"


def test_select_track_without_tracks_is_not_found():
    with pytest.raises(ExtractionError) as excinfo:
        select_track([], ("en",))
    assert excinfo.value.kind is FailureKind.NOT_FOUND


# ---------------------------------------------------------------------------
# SRT
# ---------------------------------------------------------------------------

SRT = "\ufeff" + """1
00:00:01,000 --> 00:00:03,500
Hello
there

2
00:00:04.000 --> 00:00:05,000
second

3
00:00:09,000 --> 00:00:08,000
backwards

4
garbage --> nonsense
skipped
"""


def test_parse_srt():
    segments = parse_srt(SRT.replace("\n", "\r\n"))

    assert [s.text for s in segments] == ["Hello there", "second"]
    assert segments[0].start == 1.0
    assert segments[0].duration == 2.5
    assert segments[1].start == 4.0
    assert segments[1].duration == 1.0


def test_parse_srt_empty():
    assert parse_srt("") == []
