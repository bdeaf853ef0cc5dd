"""Structured Logging — JSON formatter output and handler setup."""

import json
import logging

from empirion.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "empirion.test", logging.WARNING, __file__, 1, "Plan saved", None, None,
    )
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_json_line_has_base_fields():
    entry = json.loads(JSONFormatter().format(_record()))
    assert entry["level"] == "WARNING"
    assert entry["logger"] == "empirion.test"
    assert entry["msg"] == "Plan saved"
    assert "ts" in entry


def test_context_fields_copied_when_set():
    entry = json.loads(JSONFormatter().format(
        _record(team_id="team-1", plan_version=3, round_number=None, secret="x"),
    ))
    assert entry["team_id"] == "team-1"
    assert entry["plan_version"] == 3
    assert "round_number" not in entry
    assert "secret" not in entry


def test_setup_logging_does_not_stack_handlers():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        setup_logging("DEBUG", "json")
        setup_logging("DEBUG", "text")
        added = [h for h in root.handlers if h not in before]
        assert len(added) == 1
        assert root.level == logging.DEBUG
    finally:
        for h in root.handlers[:]:
            if h not in before:
                root.removeHandler(h)
        root.setLevel(level)
