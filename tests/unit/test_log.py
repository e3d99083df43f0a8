"""Tests for configure_logging."""

from __future__ import annotations

import io
import logging

from rich.console import Console
from rich.logging import RichHandler

from studydeck.log import configure_logging


def _console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=120), buffer


def test_installs_single_rich_handler():
    console, _ = _console()
    configure_logging("INFO", console=console)
    configure_logging("INFO", console=console)

    handlers = logging.getLogger("studydeck").handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], RichHandler)


def test_level_filtering():
    console, buffer = _console()
    configure_logging("WARNING", console=console)

    logger = logging.getLogger("studydeck.ingest.writer")
    logger.info("quiet message")
    logger.warning("loud message")

    output = buffer.getvalue()
    assert "loud message" in output
    assert "quiet message" not in output


def test_level_names_and_numbers():
    configure_logging("debug", console=_console()[0])
    assert logging.getLogger("studydeck").level == logging.DEBUG
    configure_logging(logging.ERROR, console=_console()[0])
    assert logging.getLogger("studydeck").level == logging.ERROR


def test_unknown_level_falls_back_to_warning():
    configure_logging("CHATTY", console=_console()[0])
    assert logging.getLogger("studydeck").level == logging.WARNING


def test_third_party_loggers_quieted():
    configure_logging("DEBUG", console=_console()[0])
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("LiteLLM").level == logging.WARNING
