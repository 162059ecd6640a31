from ..schemas import InventoryItem, InventoryUpsert, LowStockAlert, Page
from ..services.fetcher import ApiClient, ListQuery, parse_as


def list_inventory(client: ApiClient, query: ListQuery) -> Page[InventoryItem]:
    return client.fetch("inventory", query)


def upsert_item(client: ApiClient, payload: InventoryUpsert) -> InventoryItem:
    """Create or update the item keyed by ``payload.product``."""
    data = client.post("/api/inventory", resource="inventory", json=payload.model_dump(by_alias=True))
    return parse_as(InventoryItem, data, "inventory")


def get_low_stock(client: ApiClient) -> list[LowStockAlert]:
    data = client.get("/api/inventory/low-stock", resource="low stock")
    return parse_as(list[LowStockAlert], data or [], "low stock")
