"""Tests for totals computation."""

from decimal import Decimal

import pytest

from storecore.cart import CartLine, compute_totals, subtotal
from storecore.settings import Settings

SETTINGS = Settings(
    tax_rate=Decimal("0.13"),
    shipping_cost=Decimal("3.50"),
    free_shipping_threshold=Decimal("25.00"),
)


class TestComputeTotals:
    def test_below_threshold_pays_shipping(self):
        totals = compute_totals([CartLine("p-1", 2, Decimal("10.00"))], SETTINGS)

        assert totals.subtotal == Decimal("20.00")
        assert totals.taxes == Decimal("2.60")
        assert totals.shipping == Decimal("3.50")
        assert totals.total == Decimal("26.10")
        assert totals.currency == "USD"

    def test_at_or_above_threshold_ships_free(self):
        totals = compute_totals([CartLine("p-1", 1, Decimal("30.00"))], SETTINGS)

        assert totals.subtotal == Decimal("30.00")
        assert totals.shipping == Decimal("0")
        assert totals.taxes == Decimal("3.90")
        assert totals.total == Decimal("33.90")

    def test_exactly_threshold_ships_free(self):
        totals = compute_totals([CartLine("p-1", 1, Decimal("25.00"))], SETTINGS)

        assert totals.shipping == 0

    def test_empty_lines_apply_formula_as_written(self):
        totals = compute_totals([], SETTINGS)

        assert totals.subtotal == 0
        assert totals.taxes == 0
        assert totals.shipping == Decimal("3.50")
        assert totals.total == Decimal("3.50")

    def test_currency_comes_from_settings(self):
        totals = compute_totals([], Settings(currency="EUR"))

        assert totals.currency == "EUR"

    @pytest.mark.parametrize(
        "lines",
        [
            [CartLine("a", 1, Decimal("0.99"))],
            [CartLine("a", 3, Decimal("7.10")), CartLine("b", 1, Decimal("4.45"))],
            [CartLine("a", 10, Decimal("12.34")), CartLine("b", 2, Decimal("0.01"))],
        ],
    )
    def test_total_is_sum_of_parts(self, lines):
        totals = compute_totals(lines, SETTINGS)

        assert totals.subtotal == sum(line.unit_price * line.quantity for line in lines)
        assert totals.taxes == totals.subtotal * SETTINGS.tax_rate
        assert totals.total == totals.subtotal + totals.taxes + totals.shipping


class TestSubtotal:
    def test_sums_line_totals(self):
        lines = [CartLine("a", 2, Decimal("1.50")), CartLine("b", 1, Decimal("2.25"))]

        assert subtotal(lines) == Decimal("5.25")
        assert sum(line.line_total for line in lines) == Decimal("5.25")
