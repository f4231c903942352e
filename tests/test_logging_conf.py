from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import structlog

from zincsink import logging_conf


@pytest.fixture
def fresh_logging(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(logging_conf, "_LOGGING_INITIALISED", False)
    yield
    app_logger = logging.getLogger(logging_conf.LOGGER_NAME)
    for handler in list(app_logger.handlers):
        handler.close()
        app_logger.removeHandler(handler)
    app_logger.propagate = True
    structlog.reset_defaults()


def test_configure_logging_writes_json_file(tmp_path: Path, fresh_logging) -> None:
    log_file = tmp_path / "logs" / "zincsink.log"
    logger = logging_conf.configure_logging(log_file=log_file)
    logger.info("exporter_started", index="metrics")
    structlog.get_logger("zincsink.exporter").warning("flush_failed", records=2)

    for handler in logging.getLogger(logging_conf.LOGGER_NAME).handlers:
        handler.flush()
    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    events = {line["event"]: line for line in lines}
    assert events["exporter_started"]["index"] == "metrics"
    assert events["flush_failed"]["records"] == 2
    assert events["flush_failed"]["name"] == "zincsink.exporter"


def test_configure_logging_is_idempotent(fresh_logging) -> None:
    logging_conf.configure_logging(verbose=True)
    handlers = list(logging.getLogger(logging_conf.LOGGER_NAME).handlers)
    logging_conf.configure_logging(verbose=True)
    assert logging.getLogger(logging_conf.LOGGER_NAME).handlers == handlers
    assert logging.getLogger(logging_conf.LOGGER_NAME).level == logging.DEBUG
