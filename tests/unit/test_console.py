from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
from rich.logging import RichHandler

from autocommit.core.console import CLIENT_LOGGERS, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_loggers() -> Iterator[None]:
    names = ("autocommit", *CLIENT_LOGGERS)
    saved = {name: logging.getLogger(name).level for name in names}
    app = logging.getLogger("autocommit")
    handlers, propagate = list(app.handlers), app.propagate
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)
    app.handlers[:] = handlers
    app.propagate = propagate


def test_uses_configured_level() -> None:
    logger = setup_logging(level="info")

    assert logger.name == "autocommit"
    assert logger.level == logging.INFO
    assert logger.propagate is False


def test_unknown_level_falls_back_to_warning() -> None:
    assert setup_logging(level="chatty").level == logging.WARNING


def test_verbose_forces_debug() -> None:
    assert setup_logging(level="ERROR", verbose=True).level == logging.DEBUG


def test_repeated_setup_keeps_one_handler() -> None:
    setup_logging()
    logger = setup_logging()

    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], RichHandler)


def test_client_loggers_quiet_unless_verbose() -> None:
    setup_logging(level="DEBUG")
    assert all(logging.getLogger(name).level == logging.WARNING for name in CLIENT_LOGGERS)

    setup_logging(verbose=True)
    assert all(logging.getLogger(name).level == logging.DEBUG for name in CLIENT_LOGGERS)


def test_module_loggers_inherit_app_handler() -> None:
    setup_logging(level="INFO")

    child = get_logger("autocommit.pr.pipeline")

    assert child.getEffectiveLevel() == logging.INFO
    assert child.handlers == []
    assert get_logger().handlers
