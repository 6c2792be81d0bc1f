import threading

import pytest

from podpicker.transcripts.errors import ExtractionCancelled, ExtractionError
from podpicker.transcripts.schema import FailureKind
from podpicker.transcripts.title import parse_title, placeholder_title, resolve_title

from fakes import VIDEO_ID, WATCH_PAGE, WATCH_URL, FakeHttpClient


@pytest.mark.parametrize(
    "html, expected",
    [
        ("<html><head><title>Test Video - YouTube</title></head></html>", "Test Video"),
        ("<title>  Tom &amp; Jerry - YouTube  </title>", "Tom & Jerry"),
        ("<title>No suffix here</title>", "No suffix here"),
        ("<title> - YouTube</title>", None),
        ("<title>YouTube</title>", None),
        ("<html><body>no title</body></html>", None),
    ],
)
def test_parse_title(html, expected):
    assert parse_title(html) == expected


def test_resolve_title_from_watch_page():
    client = FakeHttpClient({WATCH_URL: WATCH_PAGE})
    assert resolve_title(VIDEO_ID, client) == "Test Video"
    assert client.calls[0].params == {"v": VIDEO_ID}


def test_resolve_title_falls_back_on_fetch_error():
    client = FakeHttpClient({WATCH_URL: ExtractionError(FailureKind.NETWORK_ERROR, "boom")})
    assert resolve_title(VIDEO_ID, client) == placeholder_title(VIDEO_ID) == "YouTube Video abcdefghijk"


def test_resolve_title_falls_back_on_missing_title():
    client = FakeHttpClient({WATCH_URL: "<html></html>"})
    assert resolve_title(VIDEO_ID, client) == "YouTube Video abcdefghijk"


def test_resolve_title_propagates_cancellation():
    cancel = threading.Event()
    cancel.set()
    client = FakeHttpClient({WATCH_URL: WATCH_PAGE}, cancel_event=cancel)
    with pytest.raises(ExtractionCancelled):
        resolve_title(VIDEO_ID, client)
