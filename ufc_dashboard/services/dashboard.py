"""
Dashboard composition: summary, trend and low-stock fetched independently,
cached for a short time and folded together with the live channel.
"""
import time
from typing import Any, Callable, Optional

from ..api import inventory as inventory_api
from ..api import sales as sales_api
from ..logging_config import get_logger
from ..schemas import Granularity, SalesSummary
from .fetcher import ApiClient, FetchResult, isolate
from .live_events import LiveEventReconciler
from .scope import ViewScope
from .view_models import DashboardView, assemble_dashboard

logger = get_logger("dashboard")

DASHBOARD_KEY = "dashboard"


class ViewCache:
    """Short-lived cache of successful section fetches."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[tuple, tuple[float, Any]] = {}

    def get(self, key: tuple) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl:
            del self._entries[key]
            return None
        return value

    def put(self, key: tuple, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    def invalidate(self, prefix: Optional[str] = None) -> None:
        """Drop every entry, or only those whose key starts with ``prefix``."""
        if prefix is None:
            self._entries.clear()
            return
        for key in [k for k in self._entries if k[0] == prefix]:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)


class DashboardService:
    def __init__(
        self,
        client: ApiClient,
        cache: Optional[ViewCache] = None,
        reconciler: Optional[LiveEventReconciler] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.cache = cache if cache is not None else ViewCache(client.settings.cache_ttl_seconds)
        self.reconciler = reconciler
        self._clock = clock

    def _section(
        self,
        name: str,
        variant: str,
        fetch: Callable[[], Any],
        default: Any,
        label: str,
        scope: Optional[ViewScope],
    ) -> tuple[FetchResult, Optional[float]]:
        key = (DASHBOARD_KEY, name, variant)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        started_at = self._clock()
        result = isolate(fetch, default, label=label, notices=self.client.notices)
        if scope is not None:
            scope.guard(result)
        if result.ok:
            self.cache.put(key, (result, started_at))
        return result, started_at

    def load(self, granularity: Granularity = "daily", scope: Optional[ViewScope] = None) -> DashboardView:
        """
        Build the dashboard view model.

        A failing section renders zeroed with its own error; only AuthInvalid
        aborts the whole view.
        """
        # re-check before the first request; an expired session issues none
        self.client.session.require_valid()

        summary, _ = self._section(
            "summary", granularity,
            lambda: sales_api.get_summary(self.client, granularity),
            SalesSummary.zeroed(), "sales summary", scope,
        )
        trend, _ = self._section(
            "trend", granularity,
            lambda: sales_api.get_trend(self.client, granularity),
            [], "sales trend", scope,
        )
        low_stock, low_stock_started_at = self._section(
            "low_stock", "all",
            lambda: inventory_api.get_low_stock(self.client),
            [], "low stock data", scope,
        )

        events = self.reconciler.history if self.reconciler is not None else []
        view = assemble_dashboard(granularity, summary, trend, low_stock, low_stock_started_at, events)
        logger.debug(
            f"Dashboard assembled ({granularity}): "
            f"{len(view.low_stock.data)} low stock, {len(events)} live events"
        )
        return view

    def invalidate(self) -> None:
        self.cache.invalidate(DASHBOARD_KEY)
