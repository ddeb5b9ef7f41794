# Overview: Service-layer pricing rules; pure functions over product and order-item snapshots.

"""
Pricing Engine

PRICING RULES:
- by_area: width x height x unit_price (dimensions in cm, price per cm²)
- by_package / by_unit: quantity x unit_price
- unresolved product (deleted, never chosen): 0, so an order can still be
  saved with a zero-priced line
- unknown calculation method: 0

No unit validation: zero or negative dimensions give a zero or negative
line price and are accepted.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping

from ..records import (
    METHOD_BY_AREA,
    METHOD_BY_PACKAGE,
    METHOD_BY_UNIT,
    OrderItem,
    ProductRecord,
)


ZERO = Decimal("0")
CENT = Decimal("0.01")


def index_products(products: Iterable[ProductRecord]) -> dict[str, ProductRecord]:
    """Products snapshot keyed by id."""
    return {product.id: product for product in products}


def price_item(item: OrderItem, product: ProductRecord | None) -> Decimal:
    """Price of a single order line for the given product (or None)."""
    if product is None:
        return ZERO

    method = product.calculation_method
    if method == METHOD_BY_AREA:
        return item.width * item.height * product.unit_price
    if method in (METHOD_BY_PACKAGE, METHOD_BY_UNIT):
        return item.quantity * product.unit_price
    return ZERO


def price_items(items: Iterable[OrderItem], products: Mapping[str, ProductRecord]) -> list[Decimal]:
    return [price_item(item, products.get(item.product_id)) for item in items]


def order_total(items: Iterable[OrderItem], products: Mapping[str, ProductRecord]) -> Decimal:
    """Sum of line prices. Zero for an empty item list."""
    return sum(price_items(items, products), ZERO)


def round_amount(amount: Decimal) -> Decimal:
    """Round to the 2-decimal precision amounts are stored with."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
