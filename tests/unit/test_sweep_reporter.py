"""Unit tests for the logging sweep reporter."""

import logging

from resource_janitor.models import SweepReport
from resource_janitor.services import LoggingSweepReporter


def test_swept_keys_logged_once_at_warning(caplog):
    caplog.set_level(logging.DEBUG, logger="resource_janitor")

    LoggingSweepReporter().report(SweepReport(swept=["a", "b"], forgotten=[], tracked=2))

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert warnings[0].getMessage() == "2 resources swept: ['a', 'b']"


def test_forgotten_keys_logged_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="resource_janitor")

    LoggingSweepReporter().report(SweepReport(swept=[], forgotten=["gone-1", "gone-2"], tracked=0))

    messages = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
    assert messages == ["gone-1: deleted since last run", "gone-2: deleted since last run"]
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_quiet_when_nothing_happened(caplog):
    caplog.set_level(logging.DEBUG)

    LoggingSweepReporter().report(SweepReport(swept=[], forgotten=[], tracked=5))

    assert caplog.records == []


def test_custom_logger(caplog):
    log = logging.getLogger("janitor.custom")
    caplog.set_level(logging.WARNING, logger="janitor.custom")

    LoggingSweepReporter(log).report(SweepReport(swept=["x"], forgotten=[], tracked=1))

    assert caplog.records[0].name == "janitor.custom"
