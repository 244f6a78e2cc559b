"""Tests for the pricing rules: free shipping, tax and totals."""

from decimal import Decimal

import pytest

from marketplace.domain.checkout import DeliveryMethodSnapshot
from marketplace.domain.pricing import (
    compute_totals,
    is_free_shipping,
    money,
    shipping_cost,
    tax_amount,
)


def method(base_cost):
    return DeliveryMethodSnapshot(id="dm-1", name="Standard", base_cost=Decimal(base_cost), estimated_days=5)


class TestShipping:
    @pytest.mark.parametrize(
        "subtotal, base_cost, expected",
        [
            ("1000", "50", Decimal("0")),
            ("1000", "60", Decimal("60")),
            ("500", "50", Decimal("50")),
            ("999", "50", Decimal("0")),
            ("998.99", "50", Decimal("50")),
            ("999", "50.01", Decimal("50.01")),
        ],
    )
    def test_free_shipping_needs_threshold_and_cap(self, subtotal, base_cost, expected):
        assert shipping_cost(Decimal(subtotal), Decimal(base_cost)) == expected

    def test_expensive_method_never_discounted(self):
        assert not is_free_shipping(Decimal("100000"), Decimal("150"))

    def test_zero_subtotal_pays_base_cost(self):
        assert shipping_cost(Decimal("0"), Decimal("50")) == Decimal("50")


class TestTax:
    def test_tax_is_eighteen_percent(self):
        assert tax_amount(Decimal("1000")) == Decimal("180.00")

    def test_tax_rounds_to_two_places(self):
        #12.345 * 0.18 = 2.2221
        assert tax_amount(Decimal("12.345")) == Decimal("2.22")
        #0.25 * 0.18 = 0.045, half up
        assert tax_amount(Decimal("0.25")) == Decimal("0.05")

    def test_tax_on_empty_cart(self):
        assert tax_amount(Decimal("0")) == Decimal("0.00")


class TestTotals:
    def test_total_is_sum_of_parts(self):
        totals = compute_totals(Decimal("1000"), method("60"))

        assert totals.shipping_cost == Decimal("60")
        assert totals.tax_amount == Decimal("180.00")
        assert totals.total == Decimal("1240.00")
        assert totals.total == totals.subtotal + totals.shipping_cost + totals.tax_amount

    def test_total_with_free_shipping(self):
        totals = compute_totals(Decimal("1000"), method("50"))
        assert totals.total == Decimal("1180.00")

    @pytest.mark.parametrize("subtotal", ["0", "0.01", "35", "998.99", "999", "12345.67"])
    def test_presented_total_matches_presented_parts(self, subtotal):
        shown = compute_totals(Decimal(subtotal), method("50")).as_dict()
        assert shown["total"] == shown["subtotal"] + shown["shipping_cost"] + shown["tax_amount"]

    def test_recompute_is_identical(self):
        first = compute_totals(Decimal("1234.56"), method("50"))
        second = compute_totals(Decimal("1234.56"), method("50"))

        assert first == second
        assert first.as_dict() == second.as_dict()

    def test_accepts_model_rows(self):
        class Row:
            base_cost = Decimal("150.00")

        assert compute_totals(Decimal("10"), Row()).shipping_cost == Decimal("150.00")

    def test_custom_tax_rate(self):
        totals = compute_totals(Decimal("100"), method("50"), tax_rate=Decimal("0.05"))
        assert totals.tax_amount == Decimal("5.00")


def test_money_rounds_half_up():
    assert money("2.345") == Decimal("2.35")
    assert money(Decimal("10")) == Decimal("10.00")
