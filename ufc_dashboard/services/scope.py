"""Per-mount lifetime of a credential-gated view."""
from typing import Callable, Optional, TypeVar

from ..errors import StaleViewError
from ..logging_config import get_logger

logger = get_logger("scope")

T = TypeVar("T")


class ViewScope:
    """
    Owns what a mounted view acquired (live channels, subscriptions).

    Once closed, late fetch results are rejected through ``guard`` so they
    never land on a view that is gone.
    """

    def __init__(self, name: str):
        self.name = name
        self._closed = False
        self._finalizers: list[Callable[[], None]] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def own(self, close: Callable[[], None]) -> None:
        if self._closed:
            close()
            return
        self._finalizers.append(close)

    def guard(self, value: T) -> T:
        if self._closed:
            raise StaleViewError(f"Dropping result for closed view '{self.name}'")
        return value

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        finalizers, self._finalizers = self._finalizers, []
        for close in reversed(finalizers):
            try:
                close()
            except Exception:
                logger.exception(f"Failed to release resource of view '{self.name}'")
        logger.debug(f"View '{self.name}' closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def switch_view(current: Optional[ViewScope], name: str) -> ViewScope:
    """Close the previous view's scope when navigating to another one."""
    if current is not None and current.name == name and not current.closed:
        return current
    if current is not None:
        current.close()
    return ViewScope(name)
