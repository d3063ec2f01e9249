"""Tests for logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from smartctl_exporter.logging import configure_logging


@pytest.fixture
def restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    access_level = logging.getLogger("aiohttp.access").level
    asyncio_level = logging.getLogger("asyncio").level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("aiohttp.access").setLevel(access_level)
    logging.getLogger("asyncio").setLevel(asyncio_level)


def test_configure_logging_writes_file(tmp_path: Path, restore_root_logging: None) -> None:
    log_path = tmp_path / "logs" / "exporter.log"

    configure_logging("debug", log_path=log_path)
    logging.getLogger("smartctl_exporter.test").debug("hello from test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logging.getLogger().level == logging.DEBUG
    assert "hello from test" in log_path.read_text()
    assert logging.getLogger("asyncio").level == logging.INFO


def test_configure_logging_quiets_access_log(restore_root_logging: None) -> None:
    configure_logging("INFO")
    assert logging.getLogger("aiohttp.access").level == logging.WARNING


def test_configure_logging_keeps_access_log_when_requested(restore_root_logging: None) -> None:
    logging.getLogger("aiohttp.access").setLevel(logging.NOTSET)
    configure_logging("bogus", log_access=True)

    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("aiohttp.access").level == logging.NOTSET


def test_unknown_level_is_reported(tmp_path: Path, restore_root_logging: None) -> None:
    log_path = tmp_path / "exporter.log"

    configure_logging("chatty", log_path=log_path)
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logging.getLogger().level == logging.INFO
    assert "Unknown log level 'chatty'; using INFO" in log_path.read_text()
