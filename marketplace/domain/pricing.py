# marketplace/domain/pricing.py
"""
Order pricing.

Every place that shows or charges a total goes through compute_totals, so the
free shipping rule and the tax rate live in exactly one spot.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from marketplace.utils.settings import TAX_RATE, FREE_SHIPPING_THRESHOLD, FREE_SHIPPING_CAP

TWOPLACES = Decimal("0.01")


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    shipping_cost: Decimal
    tax_amount: Decimal
    total: Decimal

    def as_dict(self) -> dict:
        return {
            "subtotal": money(self.subtotal),
            "shipping_cost": money(self.shipping_cost),
            "tax_amount": self.tax_amount,
            "total": money(self.total),
        }


def is_free_shipping(
    subtotal: Decimal,
    base_cost: Decimal,
    threshold: Decimal = FREE_SHIPPING_THRESHOLD,
    cap: Decimal = FREE_SHIPPING_CAP,
) -> bool:
    #capped: a method dearer than the cap is never discounted
    return subtotal >= threshold and base_cost <= cap


def shipping_cost(subtotal: Decimal, base_cost: Decimal) -> Decimal:
    base_cost = Decimal(base_cost)
    if is_free_shipping(subtotal, base_cost):
        return Decimal("0")
    return base_cost


def tax_amount(subtotal: Decimal, tax_rate: Decimal = TAX_RATE) -> Decimal:
    return money(subtotal * tax_rate)


def compute_totals(subtotal: Decimal, delivery_method, tax_rate: Decimal = TAX_RATE) -> Totals:
    """
    delivery_method is anything with a ``base_cost`` (model row or snapshot).
    The caller guarantees one was selected.
    """
    shipping = shipping_cost(subtotal, delivery_method.base_cost)
    tax = tax_amount(subtotal, tax_rate)

    return Totals(
        subtotal=subtotal,
        shipping_cost=shipping,
        tax_amount=tax,
        total=subtotal + shipping + tax,
    )
