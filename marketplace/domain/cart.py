# marketplace/domain/cart.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable


@dataclass(frozen=True)
class CartLine:
    product_id: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


def subtotal(lines: Iterable[CartLine]) -> Decimal:
    #no rounding while summing, round only when presenting
    return sum((line.unit_price * line.quantity for line in lines), Decimal("0"))


def item_count(lines: Iterable[CartLine]) -> int:
    return sum(line.quantity for line in lines)
