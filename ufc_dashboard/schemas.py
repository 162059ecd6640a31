from datetime import datetime
from typing import Generic, Literal, Optional, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from . import metrics
from .errors import FormValidationError

# Catalogue offered by the sale and inventory forms
PRODUCTS = [
    "Men Suits", "Skirt Suit", "Ladies Trouser Suit", "Official Shoes",
    "Children Shoes", "Bata School Shoes", "Women Shoes", "Trousers",
    "Dresses", "Boys Suits", "Dry Cleaning Service", "Laundry Machine",
]

DEFAULT_LOW_STOCK_THRESHOLD = 10

SortOrder = Literal["asc", "desc"]
Granularity = Literal["daily", "weekly", "monthly"]

T = TypeVar("T")


class ApiModel(BaseModel):
    """Remote payloads are camelCase; Mongo ids arrive as ``_id``."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# -----------------------------
# Remote records
# -----------------------------

class SaleRecord(ApiModel):
    id: Optional[str | int] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    product: str
    quantity: int = Field(gt=0)
    selling_price: Optional[float] = Field(default=None, ge=0)
    buying_price: Optional[float] = Field(default=None, ge=0)
    date: Optional[datetime] = None

    # present on summary.recentSales
    server_total_price: Optional[float] = Field(default=None, alias="totalPrice")
    server_profit: Optional[float] = Field(default=None, alias="profit")

    @property
    def total_revenue(self) -> float:
        if self.selling_price is None and self.server_total_price is not None:
            return self.server_total_price
        return metrics.revenue(self.quantity, self.selling_price)

    @property
    def total_cost(self) -> float:
        return metrics.cost(self.quantity, self.buying_price)

    @property
    def profit(self) -> float:
        if self.buying_price is None and self.server_profit is not None:
            return self.server_profit
        if self.selling_price is None or self.buying_price is None:
            return 0.0
        return metrics.profit(self.total_revenue, self.total_cost)


class InventoryItem(ApiModel):
    id: Optional[str | int] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    product: str
    stock: int = Field(ge=0)
    buying_price: float = Field(default=0.0, ge=0)
    low_stock_threshold: int = Field(default=DEFAULT_LOW_STOCK_THRESHOLD, ge=0)

    @property
    def status(self) -> Literal["low", "ok"]:
        return "low" if self.stock <= self.low_stock_threshold else "ok"


class LowStockAlert(ApiModel):
    product: str
    stock: int
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD


class AnalyticsRow(ApiModel):
    product: str = Field(validation_alias=AliasChoices("product", "_id"))
    total_quantity: float = 0
    total_revenue: float = 0
    total_cost: float = 0
    total_profit: float = 0


class TrendPoint(ApiModel):
    date: datetime
    total_revenue: float = 0
    total_profit: float = 0


class SalesSummary(ApiModel):
    total_sales: int = 0
    total_revenue: float = 0
    total_profit: float = 0
    recent_sales: list[SaleRecord] = Field(default_factory=list)
    top_products: list[AnalyticsRow] = Field(default_factory=list)

    @classmethod
    def zeroed(cls) -> "SalesSummary":
        return cls()


class Page(BaseModel, Generic[T]):
    items: list[T] = Field(default_factory=list)
    total: int = 0


# -----------------------------
# Submissions
# -----------------------------

class SaleCreate(ApiModel):
    product: str = Field(min_length=1, title="Product")
    quantity: int = Field(gt=0, title="Quantity")
    selling_price: float = Field(ge=0, title="Selling price")
    buying_price: float = Field(ge=0, title="Buying price")


class InventoryUpsert(ApiModel):
    product: str = Field(min_length=1, title="Product")
    stock: int = Field(ge=0, title="Stock")
    buying_price: float = Field(default=0.0, ge=0, title="Buying price")
    low_stock_threshold: int = Field(default=DEFAULT_LOW_STOCK_THRESHOLD, ge=0, title="Low stock threshold")


class Credentials(ApiModel):
    username: str = Field(min_length=1, title="Username")
    password: str = Field(min_length=1, title="Password")


class Registration(Credentials):
    password: str = Field(min_length=6, title="Password")


M = TypeVar("M", bound=BaseModel)


def _describe(model_cls: type[BaseModel], error: dict) -> str:
    name = str(error["loc"][0]) if error["loc"] else ""
    field = model_cls.model_fields.get(name)
    if field is None:
        for field_name, candidate in model_cls.model_fields.items():
            if candidate.alias == name:
                field, name = candidate, field_name
                break
    title = (field.title if field and field.title else name.replace("_", " ").capitalize())

    kind = error["type"]
    ctx = error.get("ctx") or {}
    if kind == "missing":
        return f"{title} is required"
    if kind == "greater_than":
        return f"{title} must be greater than {ctx.get('gt')}"
    if kind == "greater_than_equal":
        if ctx.get("ge") == 0:
            return f"{title} cannot be negative"
        return f"{title} must be at least {ctx.get('ge')}"
    if kind == "string_too_short":
        if ctx.get("min_length") == 1:
            return f"{title} is required"
        return f"{title} must be at least {ctx.get('min_length')} characters"
    return f"{title}: {error['msg']}"


def parse_form(model_cls: type[M], data: dict) -> M:
    """
    Validate raw form input before anything is sent.

    Blank values count as missing. Raises FormValidationError carrying one
    message per violated field.
    """
    cleaned = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        cleaned[key] = value

    try:
        return model_cls.model_validate(cleaned)
    except ValidationError as exc:
        raise FormValidationError([_describe(model_cls, err) for err in exc.errors()]) from exc
