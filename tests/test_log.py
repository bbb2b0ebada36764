from __future__ import annotations

import io
import logging

from batsretry.log import configure_logging, get_logger


def test_bound_fields_are_rendered() -> None:
    stream = io.StringIO()
    logger = configure_logging(stream=stream)
    logger.bind(file="nginx.xml").bind(testcase="reload config").info("Adding failed testcase")
    line = stream.getvalue().strip()
    assert "@level=info" in line
    assert '@message="Adding failed testcase"' in line
    assert "file=nginx.xml" in line
    assert 'testcase="reload config"' in line


def test_bind_does_not_mutate_parent() -> None:
    parent = get_logger(file="a.xml")
    child = parent.bind(testcase="x")
    assert parent.fields == {"file": "a.xml"}
    assert child.fields == {"file": "a.xml", "testcase": "x"}


def test_reconfigure_replaces_handler_and_sets_level() -> None:
    first, second = io.StringIO(), io.StringIO()
    configure_logging(stream=first)
    logger = configure_logging(verbose=True, stream=second)
    assert logger.logger.level == logging.DEBUG
    logger.debug("details")
    assert first.getvalue() == ""
    assert "@level=debug" in second.getvalue()
