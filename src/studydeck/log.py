"""Logging setup for the studydeck CLI host.

Library modules only create module loggers (``logging.getLogger(__name__)``);
handlers are installed here, once, by the process that owns the console.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_ROOT_LOGGER = "studydeck"

# Third-party loggers that are chatty at INFO.
_NOISY_LOGGERS = ("LiteLLM", "litellm", "httpx", "httpcore")


def configure_logging(level: str | int = "WARNING", console: Console | None = None) -> None:
    """Install a RichHandler on the ``studydeck`` logger.

    Idempotent: existing handlers on the package logger are replaced.

    Args:
        level: Level name (``"DEBUG"``, ``"INFO"``...) or numeric level.
        console: Console to write to. Defaults to stderr.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(_ROOT_LOGGER)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
