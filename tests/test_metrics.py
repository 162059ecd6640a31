"""Tests for derived sale metrics."""
import math
from decimal import Decimal

import pytest

from ufc_dashboard import metrics


class TestRevenueAndCost:
    """Tests for revenue() and cost()."""

    @pytest.mark.parametrize("quantity,price", [(0, 0), (1, 0), (3, 1500), (7, 12.5), (2, 0.1)])
    def test_revenue_is_quantity_times_price(self, quantity, price):
        """Test that revenue equals quantity times selling price."""
        assert metrics.revenue(quantity, price) == quantity * price

    def test_cost_is_quantity_times_buying_price(self):
        """Test that cost equals quantity times buying price."""
        assert metrics.cost(4, 250.25) == 4 * 250.25

    @pytest.mark.parametrize("bad", [None, "", "abc", float("nan"), float("inf"), [], {}, True])
    def test_non_numeric_input_counts_as_zero(self, bad):
        """Test that missing or non-numeric input yields 0 instead of NaN."""
        assert metrics.revenue(bad, 100) == 0
        assert metrics.revenue(3, bad) == 0
        assert metrics.cost(bad, bad) == 0

    def test_numeric_strings_from_form_fields(self):
        """Test that numeric strings typed into a form are parsed."""
        assert metrics.revenue("3", " 12.5 ") == 37.5

    def test_decimal_input(self):
        """Test that Decimal values are accepted."""
        assert metrics.cost(Decimal("2"), Decimal("3.25")) == 6.5


class TestProfit:
    """Tests for profit()."""

    def test_profit_is_revenue_minus_cost(self):
        """Test that profit equals revenue minus cost exactly."""
        total_revenue = metrics.revenue(3, 19.99)
        total_cost = metrics.cost(3, 12.49)
        assert metrics.profit(total_revenue, total_cost) == total_revenue - total_cost

    def test_profit_of_zeroes(self):
        """Test that zero revenue and zero cost give zero profit."""
        assert metrics.profit(0, 0) == 0

    def test_loss_is_negative(self):
        """Test that selling below cost produces a negative profit."""
        assert metrics.profit(100, 150) == -50

    def test_no_intermediate_rounding(self):
        """Test that values are not rounded before the final subtraction."""
        preview = metrics.sale_preview(3, 0.335, 0.105)
        assert math.isclose(preview["profit"], 3 * 0.335 - 3 * 0.105)
        assert metrics.format_money(preview["profit"]) == "0.69"


class TestPreviewAndFormatting:
    """Tests for the sale preview and money formatting."""

    def test_partial_form_renders_zero(self):
        """Test that a half-filled form previews 0.00 everywhere."""
        preview = metrics.sale_preview("", None, "12")
        assert preview == {"total_revenue": 0.0, "total_cost": 0.0, "profit": 0.0}
        assert metrics.format_money(preview["profit"]) == "0.00"

    def test_full_preview(self):
        """Test revenue, cost and profit for a complete form."""
        preview = metrics.sale_preview(2, 1500, 1000)
        assert preview == {"total_revenue": 3000, "total_cost": 2000, "profit": 1000}

    @pytest.mark.parametrize("value,expected", [(None, "0.00"), (3, "3.00"), (2.346, "2.35"), ("x", "0.00")])
    def test_format_money(self, value, expected):
        """Test two-decimal formatting."""
        assert metrics.format_money(value) == expected
