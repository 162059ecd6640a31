"""
Derived sale metrics.

Inputs may come straight from half-filled form fields, so anything that is
not a finite number counts as 0. Values are rounded only when formatted.
"""
import math
from numbers import Number
from typing import Any


def to_number(value: Any) -> float:
    """Coerce form/API input to a float, falling back to 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, Number):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def revenue(quantity: Any, selling_price: Any) -> float:
    return to_number(quantity) * to_number(selling_price)


def cost(quantity: Any, buying_price: Any) -> float:
    return to_number(quantity) * to_number(buying_price)


def profit(total_revenue: Any, total_cost: Any) -> float:
    return to_number(total_revenue) - to_number(total_cost)


def sale_preview(quantity: Any, selling_price: Any, buying_price: Any) -> dict[str, float]:
    """Revenue, cost and profit for the record-sale form preview."""
    total_revenue = revenue(quantity, selling_price)
    total_cost = cost(quantity, buying_price)
    return {
        "total_revenue": total_revenue,
        "total_cost": total_cost,
        "profit": profit(total_revenue, total_cost),
    }


def format_money(value: Any) -> str:
    return f"{to_number(value):.2f}"
