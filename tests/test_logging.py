import json
import logging

from podpicker.logging_core.logger import JSONFormatter, get_logger, log_event


def test_json_formatter_emits_structured_fields():
    record = logging.LogRecord("podpicker.transcripts", logging.WARNING, __file__, 1, "Strategy failed", None, None)
    record.run_id = "run-1"
    record.component = "watch_page"
    record.event_type = "failure"
    record.metadata = {"kind": "rate_limited"}

    line = json.loads(JSONFormatter().format(record))

    assert line["level"] == "WARNING"
    assert line["message"] == "Strategy failed"
    assert line["run_id"] == "run-1"
    assert line["component"] == "watch_page"
    assert line["event_type"] == "failure"
    assert line["metadata"] == {"kind": "rate_limited"}
    assert line["timestamp"].endswith("Z")


def test_log_event_carries_run_id_and_extras():
    logger = get_logger("run-42")
    captured = []

    class Capture(logging.Handler):
        def emit(self, record):
            captured.append(record)

    handler = Capture()
    logger.logger.addHandler(handler)
    try:
        log_event(logger, logging.INFO, "Trying strategy", component="direct_timedtext", event_type="start")
    finally:
        logger.logger.removeHandler(handler)

    assert captured[0].run_id == "run-42"
    assert captured[0].component == "direct_timedtext"
    assert captured[0].event_type == "start"


def test_get_logger_installs_a_single_handler():
    get_logger("a")
    get_logger("b")
    assert len(get_logger("c").logger.handlers) == 1
