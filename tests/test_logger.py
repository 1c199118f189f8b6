import json
import logging

import pytest

from eventsnap.logger import StructuredLogger, event_logger
from eventsnap.logging_config import build_logging_config


@pytest.fixture
def events_caplog(caplog):
    """The domain-event logger does not propagate once logging is configured, so capture it directly."""
    events = logging.getLogger("eventsnap.events")
    events.addHandler(caplog.handler)
    yield caplog
    events.removeHandler(caplog.handler)


def test_structured_event_is_json(events_caplog):
    with events_caplog.at_level(logging.INFO, logger="eventsnap.events"):
        event_logger.log_event("photo_status_changed", photo_id="p1", status="approved", extra={"actor": "host"})

    entry = json.loads(events_caplog.records[-1].getMessage())
    assert entry["event"] == "photo_status_changed"
    assert entry["photo_id"] == "p1"
    assert entry["status"] == "approved"
    assert entry["actor"] == "host"
    assert "timestamp" in entry


def test_non_serializable_values_are_stringified(caplog):
    class Ref:
        def __str__(self):
            return "evt_abc_12345"

    with caplog.at_level(logging.INFO, logger="eventsnap.test"):
        StructuredLogger("eventsnap.test").log_event("event_deleted", event_id=Ref())

    assert json.loads(caplog.records[-1].getMessage())["event_id"] == "evt_abc_12345"


def test_level_is_respected(events_caplog):
    with events_caplog.at_level(logging.WARNING, logger="eventsnap.events"):
        event_logger.log_event("photo_uploaded", photo_id="p1")
        event_logger.log_event("qr_render_failed", level=logging.WARNING, event_id="evt_abc_12345")

    assert [json.loads(r.getMessage())["event"] for r in events_caplog.records] == ["qr_render_failed"]


def test_logging_config_keeps_events_plain_and_quiets_libraries():
    cfg = build_logging_config("DEBUG", colored=False)

    assert cfg["formatters"]["events"] == {"format": "%(message)s"}
    assert "()" not in cfg["formatters"]["default"]
    assert cfg["loggers"]["eventsnap.events"]["propagate"] is False
    assert cfg["loggers"]["botocore"] == {"level": "WARNING"}
    assert cfg["root"]["level"] == "DEBUG"
