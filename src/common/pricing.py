from __future__ import annotations

from typing import Iterable, Protocol

MAX_TOTAL_DISCOUNT = 100.0


class HasPercent(Protocol):
    percent: float


def total_discount(discounts: Iterable[HasPercent]) -> float:
    """Сумма скидок, не больше 100%."""
    return min(MAX_TOTAL_DISCOUNT, sum(d.percent for d in discounts))


def final_price(base_price: float, discounts: Iterable[HasPercent], vat_percent: float) -> float:
    """
    finalPrice = basePrice * (1 - totalDiscount/100) * (1 + vat/100)
    """
    discount = total_discount(discounts)
    return base_price * (1 - discount / 100.0) * (1 + vat_percent / 100.0)
