import json
import logging
import time

from yoyak.events import Event, log_event
from yoyak.logging import configure_logging
from yoyak.metrics import Timer, chunks_emitted_total


def test_json_logging_structure(monkeypatch, capsys):
    monkeypatch.setenv("LOG_FORMAT", "json")
    configure_logging("DEBUG")
    log_event(Event("turn_complete", {"turn": 2, "chunks": 5, "latency_ms": 1.5, "language": "fr"}))
    captured = capsys.readouterr().err.strip().splitlines()[-1]
    data = json.loads(captured)
    assert data["event_type"] == "turn_complete"
    assert data["logger"] == "yoyak.events"
    assert data["turn"] == 2
    assert data["chunks"] == 5
    assert data["language"] == "fr"
    for key in ["latency_ms", "model", "error_category"]:
        assert key in data


def test_warning_events_are_logged_at_warning(caplog):
    caplog.set_level(logging.DEBUG, logger="yoyak.events")
    log_event(Event("continuation_limit", {"turn": 3}))
    log_event(Event("turn_start", {"turn": 1}))
    levels = {rec.event_type: rec.levelno for rec in caplog.records}
    assert levels == {"continuation_limit": logging.WARNING, "turn_start": logging.DEBUG}


def test_counter_and_timer_update():
    chunks_emitted_total.value = 0
    chunks_emitted_total.inc()
    assert chunks_emitted_total.value == 1
    timer = Timer()
    assert timer.stop() is None
    timer.start()
    time.sleep(0.001)
    assert timer.stop() > 0
    assert timer.last_ms is not None
