"""
Tests for logging setup
"""

import json

import pytest
from loguru import logger as loguru_logger

from laneful.logger import logger, setup_logging


@pytest.fixture(autouse=True)
def drop_log_sinks():
    yield
    loguru_logger.remove()


def test_extras_have_defaults():
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    try:
        logger.info("hello")
    finally:
        logger.remove(sink_id)

    assert records[0]["extra"]["request_id"] == "system"
    assert records[0]["extra"]["security_event"] is False


def test_bound_extras_kept():
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    try:
        logger.warning("rejected {}", "request", security_event=True)
    finally:
        logger.remove(sink_id)

    assert records[0]["message"] == "rejected request"
    assert records[0]["extra"]["security_event"] is True


def test_development_format(capsys):
    log = setup_logging("development", "INFO")
    log.info("plain message")

    err = capsys.readouterr().err
    assert "plain message" in err
    assert "system" in err


def test_production_serializes_json(capsys):
    log = setup_logging("production", "INFO")
    log.info("json message")

    lines = capsys.readouterr().err.strip().splitlines()
    # Production has a single serialized sink, no plain-text duplicate
    assert len(lines) == 1
    record = json.loads(lines[0])["record"]
    assert record["message"] == "json message"
    assert record["extra"]["request_id"] == "system"


def test_level_filters(capsys):
    log = setup_logging("development", "WARNING")
    log.info("hidden")
    log.warning("shown")

    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "shown" in err


def test_level_from_environment(monkeypatch, capsys):
    monkeypatch.setenv("LANEFUL_LOG_LEVEL", "error")
    log = setup_logging("development")
    log.warning("quiet")

    assert "quiet" not in capsys.readouterr().err
