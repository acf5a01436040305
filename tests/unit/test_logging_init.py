from __future__ import annotations

import logging
from io import StringIO

from crm_validator.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    set_debug,
    setup_logging,
)


def test_setup_logging_creates_labeled_stdout_logger():
    logger = setup_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_is_idempotent():
    assert setup_logging() is setup_logging()
    assert get_logger() is setup_logging()


def test_labeled_prefixes():
    fmt = LabeledFormatter()

    def render(level: int, msg: str) -> str:
        return fmt.format(logging.LogRecord("x", level, __file__, 1, msg, None, None))

    assert render(logging.INFO, "ok") == "INFO ok"
    assert render(logging.WARNING, "hm") == "WARN hm"
    assert render(logging.ERROR, "bad") == "ERROR bad"
    assert render(SUMMARY_LEVEL, "files=0/0") == "SUMMARY files=0/0"


def test_log_summary_and_child_loggers_reach_stdout(capsys):
    setup_logging()
    log_summary("files=1/1")
    logging.getLogger(f"{LOGGER_NAME}.services.engine").warning("linha ignorada")
    out = capsys.readouterr().out
    assert "SUMMARY files=1/1" in out
    assert "WARN linha ignorada" in out


def test_debug_mode(capsys):
    logger = setup_logging()
    set_debug(logger)
    logger.debug("detalhe")
    assert "DEBUG detalhe" in capsys.readouterr().out


def test_custom_stream_capture():
    stream = StringIO()
    logger = logging.getLogger("crm_validator_test_stream")
    handler = logging.StreamHandler(stream)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.log(SUMMARY_LEVEL, "rows=3")
    logger.removeHandler(handler)
    assert stream.getvalue().strip() == "SUMMARY rows=3"
