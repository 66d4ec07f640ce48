"""Tests for log context, timing and daily log files."""
from __future__ import annotations

import logging
from datetime import date

import pytest

from expense_agent.core.log import AgentLogFile, log_context, timeit
from expense_agent.core.log.context import ContextFilter


class _Collect(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture()
def collected():
    logger = logging.getLogger("tests.timing")
    handler = _Collect()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger, handler.records
    logger.removeHandler(handler)


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("tests", logging.INFO, __file__, 1, message, None, None)


def test_bound_fields_prefix_records_until_unbound():
    context_filter = ContextFilter()

    log_context.bind(run="abc123", skipped=None)
    try:
        bound = _record("hello")
        context_filter.filter(bound)
    finally:
        log_context.unbind("run")
    unbound = _record("hello")
    context_filter.filter(unbound)

    assert bound.context == "run=abc123 "
    assert unbound.context == ""


def test_context_already_on_a_record_is_kept():
    record = _record("replayed")
    record.context = "run=first "

    log_context.bind(run="second")
    try:
        ContextFilter().filter(record)
    finally:
        log_context.unbind("run")

    assert record.context == "run=first "


def test_timeit_reports_accumulated_count(collected):
    logger, records = collected

    with timeit("Agent run", logger=logger, unit="tool rounds") as timer:
        timer.add()
        timer.add()

    message = records[-1].getMessage()
    assert message.startswith("Agent run completed in ")
    assert message.endswith("(2 tool rounds)")


def test_timeit_logs_failure_and_reraises(collected):
    logger, records = collected

    with pytest.raises(RuntimeError):
        with timeit("Loading expenses.json", logger=logger, total=3, unit="expenses"):
            raise RuntimeError("boom")

    assert records[-1].levelno == logging.ERROR
    assert "failed after" in records[-1].getMessage()
    assert records[-1].getMessage().endswith("(3 expenses)")


def test_daily_log_file_is_named_after_today(tmp_path):
    handler = AgentLogFile(tmp_path / "logs")
    try:
        handler.emit(_record("written"))
    finally:
        handler.close()

    path = tmp_path / "logs" / f"agent_{date.today():%Y_%m_%d}.log"
    assert path.read_text(encoding="utf-8").strip() == "written"
