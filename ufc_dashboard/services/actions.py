"""Form submissions and the login/logout flow."""
from typing import Optional

from ..api import auth as auth_api
from ..api import inventory as inventory_api
from ..api import sales as sales_api
from ..logging_config import get_logger
from ..schemas import Credentials, InventoryItem, InventoryUpsert, Registration, SaleCreate, SaleRecord, parse_form
from .dashboard import DashboardService
from .fetcher import ApiClient

logger = get_logger("actions")


class AuthService:
    def __init__(self, client: ApiClient):
        self.client = client

    @property
    def session(self):
        return self.client.session

    def login(self, form: dict) -> bool:
        credentials = parse_form(Credentials, form)
        token = auth_api.login(self.client, credentials)
        if not self.session.set_credential(token):
            return False
        logger.info(f"User '{credentials.username}' logged in")
        self.client.notices.success("Login successful!")
        return True

    def register(self, form: dict) -> None:
        registration = parse_form(Registration, form)
        auth_api.register(self.client, registration)
        logger.info(f"User '{registration.username}' registered")
        self.client.notices.success("Registration successful! Please log in.")

    def logout(self) -> None:
        self.session.logout()
        self.client.notices.info("You have been logged out.")


def submit_sale(client: ApiClient, form: dict, dashboard: Optional[DashboardService] = None) -> SaleRecord:
    """Validate and record a sale; the dashboard cache is dropped on success."""
    payload = parse_form(SaleCreate, form)
    sale = sales_api.record_sale(client, payload)
    if dashboard is not None:
        dashboard.invalidate()
    logger.info(f"Recorded sale of {payload.quantity} x {payload.product}")
    client.notices.success("Sale recorded successfully!")
    return sale


def submit_inventory(client: ApiClient, form: dict, dashboard: Optional[DashboardService] = None) -> InventoryItem:
    """Validate and upsert an inventory item keyed by product."""
    payload = parse_form(InventoryUpsert, form)
    item = inventory_api.upsert_item(client, payload)
    if dashboard is not None:
        dashboard.invalidate()
    logger.info(f"Inventory for '{payload.product}' set to {payload.stock}")
    client.notices.success("Inventory updated successfully!")
    return item
