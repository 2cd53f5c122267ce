"""Logger helpers for the formflow runtime.

Modules call ``get_logger(__name__)``; the embedding application (or a test)
calls ``configure_logging()`` once to decide where records go.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "formflow"

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under ``formflow``."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> logging.Logger:
    """Attach a stream handler (and optionally a file handler) to the root logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Directory for ``formflow.log``.  ``None`` disables file logging.

    Returns:
        The ``formflow`` root logger.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level.upper())

    # Idempotent: replace handlers we installed earlier
    for handler in list(root.handlers):
        if getattr(handler, "_formflow_handler", False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(_FORMAT)

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    stream._formflow_handler = True  # type: ignore[attr-defined]
    root.addHandler(stream)

    if log_dir is not None:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path / "formflow.log", encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler._formflow_handler = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)

    return root
