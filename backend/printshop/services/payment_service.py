# Overview: Service-layer operations for payment settlement; order lookup and paid/unpaid derivation.

"""
Payment Settlement Service

WHY: A cashier finds an order (by id or customer name), types the amount the
customer handed over, and the order's payment fields are recorded.

SETTLEMENT RULES:
- payment_status = PAID iff paid_amount >= total_cost, else UNPAID
- payment_method is always the configured default (Cash)
- paid_amount replaces the previous value, it is not added to it, so
  settling twice with the same amount gives the same result
- change / outstanding balance are derived for display only, never stored
- one order per call; there is no batch settlement
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from flask import current_app

from ..document_store import DocumentStore
from ..permissions import authorize
from ..records import (
    AccountRecord,
    OrderRecord,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_UNPAID,
)
from ..validation import MAX_AMOUNT, ValidationError, to_decimal
from printshop.time_utils import localnow
from .pricing_service import ZERO, round_amount


# =============================================================================
# TENDER TYPES (CONSTANTS)
# =============================================================================

TENDER_CASH = "Cash"


@dataclass(frozen=True)
class Settlement:
    order: OrderRecord
    change: Decimal
    outstanding: Decimal

    def to_dict(self) -> dict:
        return {
            "order": self.order.to_dict(),
            "change": self.change,
            "outstanding": self.outstanding,
        }


def payment_status_for(total_cost: Decimal, paid_amount: Decimal) -> str:
    return PAYMENT_STATUS_PAID if paid_amount >= total_cost else PAYMENT_STATUS_UNPAID


def settlement_balance(total_cost: Decimal, paid_amount: Decimal) -> tuple[Decimal, Decimal]:
    """
    (change, outstanding) for a payment against a total.

    change = paid - total when paid >= total, else 0
    outstanding = total - paid when total > paid, else 0
    """
    if paid_amount >= total_cost:
        return paid_amount - total_cost, ZERO
    return ZERO, total_cost - paid_amount


def search_orders(orders: Iterable[OrderRecord], query: str) -> list[OrderRecord]:
    """
    Case-insensitive substring match on order id OR customer name.
    An empty query matches every order.
    """
    needle = (query or "").strip().lower()
    return [
        order for order in orders
        if needle in order.id.lower() or needle in order.customer_name.lower()
    ]


def find_orders(store: DocumentStore, query: str, actor: AccountRecord | None) -> list[OrderRecord]:
    authorize(actor, "SETTLE_PAYMENT")
    return search_orders(store.read_all("orders"), query)


def settle_order(
    store: DocumentStore,
    order_id: str,
    paid_amount,
    actor: AccountRecord | None,
    *,
    now: datetime | None = None,
) -> Settlement | None:
    """
    Record paid_amount against one order.

    Returns the Settlement, or None when the order no longer exists.

    Raises:
        PermissionDeniedError: actor may not settle payments
        ValidationError: paid_amount is not a non-negative number
        StoreError: write failed; nothing was changed
    """
    authorize(actor, "SETTLE_PAYMENT")

    amount = to_decimal(paid_amount, "paid_amount")
    if amount < 0:
        raise ValidationError("paid_amount must be >= 0")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"paid_amount cannot exceed {MAX_AMOUNT}")
    # Stored with 2 decimals; status must agree with the saved value
    amount = round_amount(amount)

    order = store.get("orders", order_id)
    if order is None:
        return None

    updated = store.update(
        "orders",
        order_id,
        {
            "paid_amount": amount,
            "payment_status": payment_status_for(order.total_cost, amount),
            "payment_method": current_app.config.get("DEFAULT_PAYMENT_METHOD", TENDER_CASH),
            "updated_at": now or localnow(),
        },
    )
    if updated is None:
        return None

    change, outstanding = settlement_balance(updated.total_cost, updated.paid_amount)
    current_app.logger.info(
        "Settled order %s: paid %s of %s (%s)",
        updated.id, updated.paid_amount, updated.total_cost, updated.payment_status,
    )
    return Settlement(order=updated, change=change, outstanding=outstanding)
