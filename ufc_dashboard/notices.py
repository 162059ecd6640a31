"""User-visible notices, queued by the data layer and rendered by the UI."""
import threading
from dataclasses import dataclass
from typing import Literal

from .logging_config import get_logger

logger = get_logger("notices")

Level = Literal["info", "success", "warning", "error"]


@dataclass(frozen=True)
class Notice:
    level: Level
    message: str


class NoticeBoard:
    """Collects notices until the presentation layer drains them."""

    def __init__(self):
        # live-channel callbacks push from the transport thread
        self._lock = threading.Lock()
        self._pending: list[Notice] = []

    def push(self, level: Level, message: str) -> Notice:
        notice = Notice(level, message)
        with self._lock:
            self._pending.append(notice)
        logger.debug(f"Notice queued [{level}]: {message}")
        return notice

    def info(self, message: str) -> Notice:
        return self.push("info", message)

    def success(self, message: str) -> Notice:
        return self.push("success", message)

    def warning(self, message: str) -> Notice:
        return self.push("warning", message)

    def error(self, message: str) -> Notice:
        return self.push("error", message)

    def drain(self) -> list[Notice]:
        with self._lock:
            pending, self._pending = self._pending, []
        return pending

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
