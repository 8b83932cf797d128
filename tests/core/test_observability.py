"""Structured logging and settings — JSON log fields and config validation."""

import json
import logging

import pytest
from pydantic import ValidationError

from taskwatch.config import Settings
from taskwatch.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "taskwatch.test", logging.INFO, __file__, 1, "Rule evaluated", None, None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_surfaces_retirement_fields():
    line = JSONFormatter().format(
        _record(rule_id="abc", outcome="deleted", state="complete", expected=3),
    )
    payload = json.loads(line)
    assert payload["message"] == "Rule evaluated"
    assert payload["rule_id"] == "abc"
    assert payload["outcome"] == "deleted"
    assert payload["expected"] == 3


def test_json_formatter_omits_absent_fields():
    payload = json.loads(JSONFormatter().format(_record()))
    assert "rule_id" not in payload
    assert payload["level"] == "INFO"


def test_setup_logging_replaces_its_own_handler():
    before = list(logging.root.handlers)
    setup_logging("DEBUG", "json")
    setup_logging("WARNING", "text")
    added = [h for h in logging.root.handlers if h not in before]
    assert len(added) == 1
    assert logging.root.level == logging.WARNING
    logging.root.removeHandler(added[0])


def test_settings_normalize_postgres_url():
    settings = Settings(database_url="postgresql://u:p@host:5432/db")
    assert settings.database_url == "postgresql+asyncpg://u:p@host:5432/db"


def test_settings_reject_non_positive_sweep_interval():
    with pytest.raises(ValidationError):
        Settings(retirement_sweep_interval_seconds=0)
