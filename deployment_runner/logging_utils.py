from __future__ import annotations

import logging
from typing import Final, Optional, TextIO

_LOGGER_NAME: Final[str] = "near.deploy"


def get_logger(name: str = _LOGGER_NAME) -> logging.Logger:
    """Return a shared console logger for deployment progress."""

    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] %(levelname)s %(message)s", "%Y-%m-%d %H:%M:%S"
            )
        )
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


def log_section(log_handle: Optional[TextIO], header: str, content: str | None = None) -> None:
    if log_handle is not None:
        log_handle.write(f"{header}\n")
        if content:
            log_handle.write(f"{content}\n")
        log_handle.flush()

    # Mirror the most important log events to the console so the user sees progress
    logger = get_logger()
    logger.info(header)
    if content:
        logger.info(content)
