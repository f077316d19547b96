"""One-call logging setup for hosts embedding the analysis engine.

The engine never configures logging on its own; it only logs through
:func:`ghost_note.utils.observability.get_logger`.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

LOG_LEVEL_ENV = "GHOST_NOTE_LOG_LEVEL"
PACKAGE_LOGGER = "ghost_note"

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_CONFIGURED = False


def _resolve_level(level: Union[str, int, None]) -> int:
    if isinstance(level, int):
        return level
    text = (level or "").strip()
    if text.isdigit():
        return int(text)
    named = logging.getLevelName(text.upper()) if text else None
    return named if isinstance(named, int) else logging.INFO


def configure_logging(level: Optional[Union[str, int]] = None, *, force: bool = False) -> None:
    """Install a root handler and set the ``ghost_note`` logger level.

    ``level`` wins over the ``GHOST_NOTE_LOG_LEVEL`` environment variable,
    which wins over ``INFO``. Repeat calls are ignored unless ``force`` is set.
    """

    global _CONFIGURED

    if _CONFIGURED and not force:
        return

    resolved = _resolve_level(level if level is not None else os.environ.get(LOG_LEVEL_ENV))
    logging.basicConfig(level=resolved, format=_DEFAULT_FORMAT, force=force)
    logging.getLogger(PACKAGE_LOGGER).setLevel(resolved)
    _CONFIGURED = True


__all__ = ["configure_logging", "LOG_LEVEL_ENV", "PACKAGE_LOGGER"]
