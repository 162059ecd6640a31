"""
Render-ready structures for each screen.

Nothing here talks to the network; inputs are fetch results and the live
event history, outputs are plain dataclasses and pandas frames.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, Iterable, Optional, Sequence, TypeVar

import pandas as pd

from .. import metrics
from ..schemas import (
    AnalyticsRow,
    Granularity,
    InventoryItem,
    LowStockAlert,
    SaleRecord,
    SalesSummary,
    TrendPoint,
)
from .fetcher import FetchResult
from .live_events import LiveEvent

T = TypeVar("T")

PLACEHOLDER_LABEL = "No data"


@dataclass(frozen=True)
class ChartSeries:
    name: str
    labels: list[str]
    values: list[float]

    @property
    def is_placeholder(self) -> bool:
        return self.labels == [PLACEHOLDER_LABEL]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({self.name: self.values}, index=pd.Index(self.labels, name="label"))


@dataclass(frozen=True)
class Section(Generic[T]):
    """One independently fetched part of a view."""

    data: T
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class SummaryCards:
    total_sales: int
    total_revenue: str
    total_profit: str


@dataclass(frozen=True)
class DashboardView:
    granularity: Granularity
    summary: Section[SummaryCards]
    revenue_trend: Section[ChartSeries]
    profit_trend: Section[ChartSeries]
    top_products: Section[list[ChartSeries]]
    recent_sales: Section[list[SaleRecord]]
    low_stock: Section[list[LowStockAlert]]
    live_alert_count: int = 0


# -----------------------------
# Low stock reconciliation
# -----------------------------

def merge_low_stock(
    snapshot: Iterable[LowStockAlert],
    snapshot_started_at: Optional[float],
    events: Iterable[LiveEvent],
) -> list[LowStockAlert]:
    """
    One alert per product, most recent observation wins.

    Live events received once the snapshot request was issued are newer than
    the snapshot; events received before it are superseded by it. Without a
    snapshot time (the snapshot fetch failed) every event counts.
    """
    merged: dict[str, LowStockAlert] = {alert.product: alert for alert in snapshot}

    for event in sorted(events, key=lambda e: e.sequence):
        if snapshot_started_at is not None and event.received_at < snapshot_started_at:
            continue
        merged[event.alert.product] = event.alert

    return [merged[product] for product in sorted(merged, key=str.casefold)]


# -----------------------------
# Chart series
# -----------------------------

def format_date_label(value: datetime, granularity: Granularity) -> str:
    if granularity == "daily":
        return value.strftime("%b %d, %H:%M")
    if granularity == "weekly":
        return f"Week {math.ceil(value.day / 7)} {value.strftime('%b %Y')}"
    return value.strftime("%B %Y")


def _series(name: str, labels: Sequence[str], values: Sequence[float]) -> ChartSeries:
    if not labels:
        return ChartSeries(name=name, labels=[PLACEHOLDER_LABEL], values=[0.0])
    return ChartSeries(name=name, labels=list(labels), values=[metrics.to_number(v) for v in values])


def trend_series(points: Sequence[TrendPoint], granularity: Granularity, field_name: str = "total_revenue") -> ChartSeries:
    ordered = sorted(points, key=lambda p: p.date)
    return _series(
        field_name,
        [format_date_label(p.date, granularity) for p in ordered],
        [getattr(p, field_name) for p in ordered],
    )


def product_series(rows: Sequence[AnalyticsRow], field_name: str = "total_revenue") -> ChartSeries:
    return _series(field_name, [r.product for r in rows], [getattr(r, field_name) for r in rows])


# -----------------------------
# Dashboard
# -----------------------------

def summary_cards(summary: SalesSummary) -> SummaryCards:
    return SummaryCards(
        total_sales=summary.total_sales,
        total_revenue=metrics.format_money(summary.total_revenue),
        total_profit=metrics.format_money(summary.total_profit),
    )


def assemble_dashboard(
    granularity: Granularity,
    summary: FetchResult[SalesSummary],
    trend: FetchResult[list[TrendPoint]],
    low_stock: FetchResult[list[LowStockAlert]],
    low_stock_started_at: Optional[float],
    events: Sequence[LiveEvent] = (),
) -> DashboardView:
    summary_error = summary.error.message if summary.error else None
    trend_error = trend.error.message if trend.error else None

    return DashboardView(
        granularity=granularity,
        summary=Section(summary_cards(summary.value), summary_error),
        revenue_trend=Section(trend_series(trend.value, granularity, "total_revenue"), trend_error),
        profit_trend=Section(trend_series(trend.value, granularity, "total_profit"), trend_error),
        top_products=Section(
            [
                product_series(summary.value.top_products, "total_revenue"),
                product_series(summary.value.top_products, "total_quantity"),
            ],
            summary_error,
        ),
        recent_sales=Section(list(summary.value.recent_sales), summary_error),
        low_stock=Section(
            merge_low_stock(
                low_stock.value,
                low_stock_started_at if low_stock.ok else None,
                events,
            ),
            low_stock.error.message if low_stock.error else None,
        ),
        live_alert_count=len(events),
    )


# -----------------------------
# Tables
# -----------------------------

SALES_COLUMNS = ["product", "quantity", "selling_price", "buying_price", "total_revenue", "profit", "date"]
INVENTORY_COLUMNS = ["product", "stock", "buying_price", "low_stock_threshold", "status"]
ANALYTICS_COLUMNS = ["product", "total_quantity", "total_revenue", "total_cost", "total_profit"]


def sales_frame(records: Iterable[SaleRecord]) -> pd.DataFrame:
    rows = [
        {
            "product": r.product,
            "quantity": r.quantity,
            "selling_price": metrics.to_number(r.selling_price),
            "buying_price": metrics.to_number(r.buying_price),
            "total_revenue": r.total_revenue,
            "profit": r.profit,
            "date": r.date,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=SALES_COLUMNS)


def inventory_frame(items: Iterable[InventoryItem]) -> pd.DataFrame:
    rows = [
        {
            "product": i.product,
            "stock": i.stock,
            "buying_price": i.buying_price,
            "low_stock_threshold": i.low_stock_threshold,
            "status": i.status,
        }
        for i in items
    ]
    return pd.DataFrame(rows, columns=INVENTORY_COLUMNS)


def analytics_frame(rows: Iterable[AnalyticsRow]) -> pd.DataFrame:
    return pd.DataFrame([r.model_dump(include=set(ANALYTICS_COLUMNS)) for r in rows], columns=ANALYTICS_COLUMNS)
