# Overview: Transient user-facing notifications (toasts) raised by the admin hooks.

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

from .time_utils import utcnow


logger = logging.getLogger(__name__)

LEVEL_SUCCESS = "success"
LEVEL_ERROR = "error"


@dataclass(frozen=True)
class Toast:
    level: str
    message: str
    created_at: datetime = field(default_factory=utcnow)


class ToastCenter:
    """
    Collects toasts until the presentation layer drains them.

    Only the most recent `max_history` toasts are kept.
    """

    def __init__(self, max_history: int = 50):
        self._pending: deque[Toast] = deque(maxlen=max_history)

    def success(self, message: str) -> Toast:
        logger.info("toast: %s", message)
        return self._push(Toast(LEVEL_SUCCESS, message))

    def error(self, message: str) -> Toast:
        logger.warning("toast: %s", message)
        return self._push(Toast(LEVEL_ERROR, message))

    def _push(self, toast: Toast) -> Toast:
        self._pending.append(toast)
        return toast

    @property
    def pending(self) -> list[Toast]:
        return list(self._pending)

    def drain(self) -> list[Toast]:
        toasts = list(self._pending)
        self._pending.clear()
        return toasts
