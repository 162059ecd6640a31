from datetime import date, datetime
from typing import Optional

from ..schemas import AnalyticsRow, Granularity, Page, SaleCreate, SaleRecord, SalesSummary, SortOrder, TrendPoint
from ..services.fetcher import ApiClient, ListQuery, parse_as

ANALYTICS_SORT_FIELDS = ("totalRevenue", "totalProfit", "totalQuantity", "totalCost")


def period_params(
    granularity: Granularity = "daily",
    start_date: Optional[date | datetime] = None,
    end_date: Optional[date | datetime] = None,
) -> dict:
    """Either an explicit date range or a daily/weekly/monthly filter."""
    if start_date or end_date:
        if not (start_date and end_date):
            raise ValueError("start_date and end_date must be given together")
        if start_date > end_date:
            raise ValueError("start_date must not be after end_date")
        return {"startDate": start_date.isoformat(), "endDate": end_date.isoformat()}
    return {"filter": granularity}


def list_sales(client: ApiClient, query: ListQuery) -> Page[SaleRecord]:
    return client.fetch("sales", query)


def record_sale(client: ApiClient, payload: SaleCreate) -> SaleRecord:
    data = client.post("/api/sales", resource="sale", json=payload.model_dump(by_alias=True))
    return parse_as(SaleRecord, data, "sale")


def get_summary(client: ApiClient, granularity: Granularity = "daily", start_date=None, end_date=None) -> SalesSummary:
    data = client.get(
        "/api/sales/summary",
        resource="sales summary",
        params=period_params(granularity, start_date, end_date),
    )
    return parse_as(SalesSummary, data or {}, "sales summary")


def get_trend(client: ApiClient, granularity: Granularity = "daily", start_date=None, end_date=None) -> list[TrendPoint]:
    data = client.get(
        "/api/sales/trend",
        resource="sales trend",
        params=period_params(granularity, start_date, end_date),
    )
    points = parse_as(list[TrendPoint], data or [], "sales trend")
    return sorted(points, key=lambda p: p.date)


def get_analytics(client: ApiClient, sort_by: str = "totalRevenue", sort_order: SortOrder = "desc") -> list[AnalyticsRow]:
    if sort_by not in ANALYTICS_SORT_FIELDS:
        raise ValueError(f"Cannot sort analytics by {sort_by}")
    data = client.get(
        "/api/sales/analytics",
        resource="sales analytics",
        params={"sortBy": sort_by, "sortOrder": sort_order},
    )
    return parse_as(list[AnalyticsRow], data or [], "sales analytics")
