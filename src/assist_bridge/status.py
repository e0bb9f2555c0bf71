from __future__ import annotations

import logging
from typing import Callable, Optional

# Progress callback: receives a short human-readable status line.
StatusCallback = Callable[[str], None]

_logger = logging.getLogger(__name__)


def notify(on_status: Optional[StatusCallback], message: str) -> None:
    """Report progress. A failing callback is logged and never alters the call."""
    if on_status is None:
        return
    try:
        on_status(message)
    except Exception:
        _logger.exception("Status callback raised for %r", message)
