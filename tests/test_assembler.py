import threading

import pytest
from pydantic import ValidationError

from podpicker.transcripts.assembler import check_transcript_availability, get_transcript
from podpicker.transcripts.errors import ExtractionCancelled, InvalidInput, NoTranscriptAvailable
from podpicker.transcripts.responses import availability_response, transcript_response
from podpicker.transcripts.schema import FailureKind, StrategyResult, Transcript, TranscriptSegment
from podpicker.transcripts.strategies import failure_result

from fakes import TIMED_TEXT, TIMEDTEXT_URL, TRACK_LISTING, TRACK_URL, VIDEO_ID, WATCH_PAGE, WATCH_URL, FakeHttpClient


class ScriptedStrategy:
    def __init__(self, result):
        self.id = result.strategy_id
        self.result = result
        self.calls = 0

    def attempt(self, video_id):
        self.calls += 1
        return self.result


def hello_world(strategy_id="scripted", title=None):
    return StrategyResult(
        strategy_id=strategy_id,
        success=True,
        segments=(
            TranscriptSegment(text="Hello", start=0.0, duration=1.5),
            TranscriptSegment(text="world", start=1.5, duration=2.0),
        ),
        language="en",
        title=title,
    )


def all_failing():
    return [
        ScriptedStrategy(failure_result("a", FailureKind.NOT_FOUND, "none")),
        ScriptedStrategy(failure_result("b", FailureKind.RATE_LIMITED, "429")),
    ]


# ---------------------------------------------------------------------------
# Transcript model
# ---------------------------------------------------------------------------

def test_full_text_invariant_is_enforced():
    segments = (TranscriptSegment(text="Hello", start=0, duration=1),)
    with pytest.raises(ValidationError):
        Transcript(video_id=VIDEO_ID, title="t", segments=segments, full_text="Goodbye")


def test_transcript_requires_segments_and_valid_id():
    with pytest.raises(ValidationError):
        Transcript.assemble(VIDEO_ID, "t", [])
    with pytest.raises(ValidationError):
        Transcript.assemble("short", "t", [TranscriptSegment(text="x", start=0, duration=0)])


# ---------------------------------------------------------------------------
# get_transcript
# ---------------------------------------------------------------------------

def test_get_transcript_end_to_end_over_fake_http():
    client = FakeHttpClient({TIMEDTEXT_URL: TRACK_LISTING, TRACK_URL: TIMED_TEXT, WATCH_URL: WATCH_PAGE})

    transcript = get_transcript(f"https://www.youtube.com/watch?v={VIDEO_ID}", client=client)

    assert transcript.to_wire() == {
        "videoId": VIDEO_ID,
        "title": "Test Video",
        "segments": [
            {"text": "Hello", "start": 0.0, "duration": 1.5},
            {"text": "world", "start": 1.5, "duration": 2.0},
        ],
        "fullText": "Hello world",
    }
    assert transcript.source_strategy == "direct_timedtext"
    assert transcript.language == "en"


def test_get_transcript_with_injected_strategies_and_title():
    strategy = ScriptedStrategy(hello_world())
    transcript = get_transcript(VIDEO_ID, strategies=[strategy], title_resolver=lambda vid: "Test Video")

    assert transcript.title == "Test Video"
    assert transcript.full_text == "Hello world"
    assert strategy.calls == 1


def test_placeholder_title_defers_to_strategy_title():
    transcript = get_transcript(
        VIDEO_ID,
        strategies=[ScriptedStrategy(hello_world(title="From Strategy"))],
        title_resolver=lambda vid: f"YouTube Video {vid}",
    )
    assert transcript.title == "From Strategy"


def test_title_failure_falls_back_to_placeholder():
    # Watch page is not routed, so the title fetch fails with a 404
    client = FakeHttpClient()
    transcript = get_transcript(VIDEO_ID, strategies=[ScriptedStrategy(hello_world())], client=client)
    assert transcript.title == "YouTube Video abcdefghijk"


def test_invalid_input_fails_before_any_strategy_runs():
    strategy = ScriptedStrategy(hello_world())
    with pytest.raises(InvalidInput):
        get_transcript("https://vimeo.com/1", strategies=[strategy], title_resolver=lambda vid: "t")
    assert strategy.calls == 0


def test_get_transcript_exhaustion():
    with pytest.raises(NoTranscriptAvailable) as excinfo:
        get_transcript(VIDEO_ID, strategies=all_failing(), title_resolver=lambda vid: "t")
    assert excinfo.value.kinds == [FailureKind.NOT_FOUND, FailureKind.RATE_LIMITED]


def test_default_title_lookup_runs_on_its_own_client():
    client = FakeHttpClient({TIMEDTEXT_URL: TRACK_LISTING, TRACK_URL: TIMED_TEXT, WATCH_URL: WATCH_PAGE})

    transcript = get_transcript(VIDEO_ID, client=client)

    assert transcript.title == "Test Video"
    assert len(client.forks) == 1
    title_client = client.forks[0]
    assert title_client is not client
    assert title_client.urls() == [WATCH_URL]
    assert WATCH_URL not in client.urls()
    assert title_client.closed
    assert not client.closed


def test_failed_chain_stops_the_title_lookup():
    forked = threading.Event()

    class SignallingClient(FakeHttpClient):
        def fork(self, cancel_event=None):
            child = super().fork(cancel_event)
            forked.set()
            return child

    class WaitsForFork(ScriptedStrategy):
        def attempt(self, video_id):
            assert forked.wait(5)
            return super().attempt(video_id)

    client = SignallingClient({WATCH_URL: WATCH_PAGE})
    strategy = WaitsForFork(failure_result("a", FailureKind.NOT_FOUND, "none"))

    with pytest.raises(NoTranscriptAvailable):
        get_transcript(VIDEO_ID, strategies=[strategy], client=client)

    with pytest.raises(ExtractionCancelled):
        client.forks[0].get_text(WATCH_URL)


def test_title_resolver_runs_concurrently_with_the_chain():
    title_started = threading.Event()

    class WaitsForTitle(ScriptedStrategy):
        def attempt(self, video_id):
            assert title_started.wait(5)
            return super().attempt(video_id)

    def title_resolver(video_id):
        title_started.set()
        return "Concurrent"

    transcript = get_transcript(VIDEO_ID, strategies=[WaitsForTitle(hello_world())], title_resolver=title_resolver)
    assert transcript.title == "Concurrent"


# ---------------------------------------------------------------------------
# check_transcript_availability
# ---------------------------------------------------------------------------

def test_check_availability_success():
    has_transcript, message, count = check_transcript_availability(
        VIDEO_ID, strategies=[ScriptedStrategy(hello_world("direct_timedtext"))]
    )
    assert has_transcript is True
    assert "direct_timedtext" in message
    assert count == 2


def test_check_availability_reports_most_specific_cause():
    strategies = [
        ScriptedStrategy(failure_result("a", FailureKind.NOT_FOUND, "none")),
        ScriptedStrategy(failure_result("b", FailureKind.DISABLED, "off")),
    ]
    has_transcript, message, count = check_transcript_availability(VIDEO_ID, strategies=strategies)
    assert (has_transcript, count) == (False, 0)
    assert "disabled" in message


# ---------------------------------------------------------------------------
# web responses
# ---------------------------------------------------------------------------

def test_transcript_response_ok():
    status, body = transcript_response(
        VIDEO_ID, strategies=[ScriptedStrategy(hello_world())], title_resolver=lambda vid: "Test Video"
    )
    assert status == 200
    assert body["videoId"] == VIDEO_ID
    assert body["fullText"] == "Hello world"


def test_transcript_response_invalid_input():
    status, body = transcript_response("not a url")
    assert status == 400
    assert "error" in body


def test_transcript_response_no_transcript():
    status, body = transcript_response(VIDEO_ID, strategies=all_failing(), title_resolver=lambda vid: "t")
    assert status == 404
    assert "rate limiting" in body["error"]
    assert [f["kind"] for f in body["failures"]] == ["not_found", "rate_limited"]


def test_transcript_response_unexpected_error():
    def exploding_title(video_id):
        raise RuntimeError("title service down")

    status, body = transcript_response(
        VIDEO_ID, strategies=[ScriptedStrategy(hello_world())], title_resolver=exploding_title
    )
    assert status == 500
    assert "title service down" in body["details"]


def test_availability_response():
    status, body = availability_response(
        f"https://youtu.be/{VIDEO_ID}", strategies=[ScriptedStrategy(hello_world())]
    )
    assert status == 200
    assert body == {
        "hasTranscript": True,
        "message": "Transcript available via scripted",
        "videoId": VIDEO_ID,
        "transcriptCount": 2,
    }


def test_availability_response_invalid_input():
    status, body = availability_response("abc")
    assert status == 400
    assert body["hasTranscript"] is False


def test_get_transcript_hello_world_scenario():
    direct = ScriptedStrategy(
        StrategyResult(
            strategy_id="direct_timedtext",
            success=True,
            segments=(
                TranscriptSegment(text="Hello", start=0, duration=1.2),
                TranscriptSegment(text="world", start=1.2, duration=0.8),
            ),
        )
    )
    transcript = get_transcript(
        "https://www.youtube.com/watch?v=abcdefghijk",
        strategies=[direct],
        title_resolver=lambda vid: "Test Video",
    )

    assert transcript.to_wire() == {
        "videoId": "abcdefghijk",
        "title": "Test Video",
        "segments": [
            {"text": "Hello", "start": 0.0, "duration": 1.2},
            {"text": "world", "start": 1.2, "duration": 0.8},
        ],
        "fullText": "Hello world",
    }
