"""
Live low-stock channel.

The reconciler owns one transport connection per gated view. Every
``lowStock`` event received is recorded once, in arrival order, and fanned
out to subscriptions. Deduplication happens later, in the view models.
"""
import queue
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Optional, Protocol

import socketio
from pydantic import ValidationError

from ..logging_config import get_logger
from ..notices import NoticeBoard
from ..schemas import LowStockAlert
from ..session import Session

logger = get_logger("live_events")

LOW_STOCK_EVENT = "lowStock"
DEGRADED_MESSAGE = "Failed to connect to real-time updates"


class ChannelState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


@dataclass(frozen=True)
class LiveEvent:
    alert: LowStockAlert
    received_at: float
    sequence: int


class Transport(Protocol):
    def connect(
        self,
        token: str,
        *,
        on_connect: Callable[[], None],
        on_event: Callable[[Any], None],
        on_error: Callable[..., None],
        on_disconnect: Callable[..., None],
    ) -> None: ...

    def disconnect(self) -> None: ...


class SocketIOTransport:
    """python-socketio client authenticated with the session token."""

    def __init__(self, url: str, event_name: str = LOW_STOCK_EVENT, wait_timeout: float = 5.0):
        self.url = url
        self.event_name = event_name
        self.wait_timeout = wait_timeout
        self._client: Optional[socketio.Client] = None

    def connect(self, token, *, on_connect, on_event, on_error, on_disconnect):
        client = socketio.Client(reconnection=True)
        client.on("connect", on_connect)
        client.on(self.event_name, on_event)
        client.on("connect_error", on_error)
        client.on("disconnect", on_disconnect)
        self._client = client
        client.connect(self.url, auth={"token": token}, wait_timeout=self.wait_timeout)

    def disconnect(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            client.disconnect()


_CLOSED = object()


class Subscription:
    """Cancellable view of the event stream, each event delivered once."""

    def __init__(self, on_close: Callable[["Subscription"], None]):
        self._queue: queue.Queue = queue.Queue()
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _deliver(self, event: LiveEvent) -> None:
        if not self._closed:
            self._queue.put(event)

    def events(self, timeout: Optional[float] = None) -> Iterator[LiveEvent]:
        """
        Lazily yield events until the subscription is closed.

        With a timeout, iteration also stops once no event arrived for that
        long.
        """
        while True:
            try:
                item = self._queue.get(timeout=timeout)
            except queue.Empty:
                return
            if item is _CLOSED:
                return
            yield item

    def drain(self) -> list[LiveEvent]:
        """Everything received since the last drain, without blocking."""
        drained = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return drained
            if item is _CLOSED:
                # keep the stream terminated for any later events() call
                self._queue.put(_CLOSED)
                return drained
            drained.append(item)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put(_CLOSED)
        self._on_close(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class LiveEventReconciler:
    """
    Disconnected/Connected state machine around a push transport.

    Use as a context manager (or call ``close()``) so the connection is
    released on every exit path.
    """

    def __init__(
        self,
        session: Session,
        transport: Transport,
        notices: Optional[NoticeBoard] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.session = session
        self.transport = transport
        self.notices = notices if notices is not None else session.notices
        self._clock = clock
        self._lock = threading.Lock()
        self._state = ChannelState.DISCONNECTED
        self._history: list[LiveEvent] = []
        self._subscriptions: list[Subscription] = []
        self._degraded_notified = False
        self._opened = False
        self._closed = False

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def history(self) -> list[LiveEvent]:
        with self._lock:
            return list(self._history)

    def open(self) -> bool:
        """
        Start the handshake with the current credential.

        A failed handshake is not fatal: the view keeps working from snapshots
        and a single degraded-mode notice is raised.
        """
        if self._closed:
            raise RuntimeError("Reconciler already closed")
        if self._opened:
            return self._state is ChannelState.CONNECTED
        self._opened = True

        token = self.session.require_valid()
        self.session.on_logout(self.close)
        try:
            self.transport.connect(
                token,
                on_connect=self._on_connect,
                on_event=self._on_event,
                on_error=self._on_error,
                on_disconnect=self._on_disconnect,
            )
        except Exception as e:
            logger.error(f"Live channel handshake failed: {e}")
            self._mark_disconnected()
            self._release_transport()
            return False
        return True

    def subscribe(self, replay: bool = False) -> Subscription:
        subscription = Subscription(on_close=self._forget)
        with self._lock:
            if replay:
                for event in self._history:
                    subscription._deliver(event)
            closed = self._closed
            if not closed:
                self._subscriptions.append(subscription)
        if closed:
            subscription.close()
        return subscription

    def close(self) -> None:
        """Tear down the connection and end all subscriptions. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._state = ChannelState.DISCONNECTED
            subscriptions, self._subscriptions = self._subscriptions, []
        self.session.remove_logout_hook(self.close)
        try:
            self._release_transport()
        finally:
            for subscription in subscriptions:
                subscription.close()
            logger.info("Live channel closed")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # -----------------------------
    # Transport callbacks
    # -----------------------------

    def _on_connect(self, *args) -> None:
        with self._lock:
            if self._closed:
                return
            self._state = ChannelState.CONNECTED
            self._degraded_notified = False
        logger.info("Live channel connected")

    def _on_event(self, data: Any) -> None:
        if self._closed:
            return
        try:
            alert = LowStockAlert.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Dropping malformed {LOW_STOCK_EVENT} event {data!r}: {e}")
            return

        with self._lock:
            if self._closed:
                return
            event = LiveEvent(alert=alert, received_at=self._clock(), sequence=len(self._history))
            self._history.append(event)
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription._deliver(event)

        self.notices.warning(f"Low stock alert: {alert.product} has {alert.stock} units left")

    def _on_error(self, *args) -> None:
        logger.error(f"Live channel error: {args[0] if args else 'unknown'}")
        self._mark_disconnected()

    def _on_disconnect(self, *args) -> None:
        logger.warning("Live channel disconnected")
        self._mark_disconnected()

    def _mark_disconnected(self) -> None:
        with self._lock:
            self._state = ChannelState.DISCONNECTED
            if self._closed or self._degraded_notified:
                return
            self._degraded_notified = True
        self.notices.error(DEGRADED_MESSAGE)

    def _release_transport(self) -> None:
        try:
            self.transport.disconnect()
        except Exception:
            logger.exception("Live channel teardown failed")

    def _forget(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
