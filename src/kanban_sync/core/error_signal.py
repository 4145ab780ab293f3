# src/kanban_sync/core/error_signal.py

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ErrorSignal:
    """
    Single-slot "last failure" notification for passive observers (banners, status lines).

    - show() overwrites whatever is there (no queue, no merge)
    - the slot stays active until clear() is called
    """

    active: bool = False
    message: str = ""
    details: str = ""

    def show(self, message: str, details: str = "") -> None:
        if self.active:
            logger.debug("ErrorSignal overwritten (previous: %s)", self.message)
        self.active = True
        self.message = message
        self.details = details
        logger.warning("%s: %s", message, details or "-")

    def clear(self) -> None:
        self.active = False
        self.message = ""
        self.details = ""
