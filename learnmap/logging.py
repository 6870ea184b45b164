"""Logger setup shared by the learnmap CLI, the analysis pipeline and the HTTP service.

Every module logs through ``get_logger`` so a single ``configure_logging`` call
controls the whole pipeline: extraction, generation, normalisation and the
FastAPI routes all emit under ``learnmap.*``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

_LOGGER_NAME = "learnmap"

LOG_FILE_ENV = "LEARNMAP_LOG_FILE"

# Client libraries used during generation that log every request at INFO/DEBUG.
NOISY_LOGGERS = ("httpx", "httpcore", "google_genai", "urllib3")


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``learnmap.<name>``, e.g. ``get_logger("extractors.page")``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Point the ``learnmap`` hierarchy at the console and, optionally, a log file.

    ``verbose`` switches to DEBUG, which includes discarded model responses.
    When ``log_file`` is omitted, ``LEARNMAP_LOG_FILE`` is used so a
    long-running ``learnmap serve`` can keep a timestamped record of analyses.
    Calling this again replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[learnmap] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is None and os.environ.get(LOG_FILE_ENV):
        log_file = Path(os.environ[LOG_FILE_ENV]).expanduser()
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


__all__ = ["LOG_FILE_ENV", "NOISY_LOGGERS", "configure_logging", "get_logger"]
