# Overview: Service-layer operations for orders; draft editing, lifecycle and identifiers.

"""
Order Lifecycle Service

LIFECYCLE:
- Draft: OrderDraft, in memory only; totals recomputed on every item change
- Active/Unpaid: persisted by create_order (payment_status=UNPAID, paid_amount=0)
- Active/Paid: set by payment_service.settle_order, never by this module
- Deleted: delete_order, terminal

Editing changes customer and items only; the payment fields are owned by
settlement and are stripped from the editable view.

IDENTIFIERS: P-<YYYYMMDD>-<HHMMSS>-<NNNNNN>, local creation time plus a
random 6-digit suffix. A generated id that already exists is regenerated,
up to ORDER_ID_MAX_ATTEMPTS times.
"""

from __future__ import annotations

import random
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from flask import current_app

from ..document_store import DocumentStore, DuplicateDocumentError
from ..permissions import authorize
from ..records import (
    AccountRecord,
    OrderItem,
    OrderRecord,
    PAYMENT_STATUS_UNPAID,
    ProductRecord,
)
from ..validation import require_customer_name
from printshop.time_utils import localnow
from .pricing_service import ZERO, index_products, order_total, price_items, round_amount


ORDER_ID_PREFIX = "P"
PAYMENT_FIELDS = ("payment_status", "payment_method", "paid_amount")


class OrderIdCollisionError(Exception):
    """Every generated order id collided with an existing order."""


def generate_order_id(now: datetime | None = None, rng: random.Random | None = None) -> str:
    now = now or localnow()
    suffix = (rng or random).randint(100000, 999999)
    return f"{ORDER_ID_PREFIX}-{now:%Y%m%d}-{now:%H%M%S}-{suffix}"


class OrderDraft:
    """
    In-memory order being entered or edited.

    Line prices and total_cost are recomputed immediately after every item
    mutation and whenever a new products snapshot arrives (see watch()).
    Saving reads the draft but never mutates it, so after a failed save the
    same draft can be submitted again.
    """

    def __init__(
        self,
        customer_name: str = "",
        items: Iterable[OrderItem] = (),
        products: Iterable[ProductRecord] = (),
        order_id: str | None = None,
        version: int | None = None,
    ):
        self.customer_name = customer_name
        self.order_id = order_id
        self.version = version
        self._items: list[OrderItem] = list(items)
        self._products: dict[str, ProductRecord] = index_products(products)
        self._subscription = None
        self.line_prices: list[Decimal] = []
        self.total_cost: Decimal = ZERO
        self._recompute()

    @classmethod
    def from_order(cls, order: OrderRecord, products: Iterable[ProductRecord] = ()) -> "OrderDraft":
        return cls(
            customer_name=order.customer_name,
            items=order.items,
            products=products,
            order_id=order.id,
            version=order.version,
        )

    @property
    def items(self) -> tuple[OrderItem, ...]:
        return tuple(self._items)

    @property
    def products(self) -> dict[str, ProductRecord]:
        return dict(self._products)

    def _recompute(self) -> None:
        self.line_prices = price_items(self._items, self._products)
        self.total_cost = sum(self.line_prices, ZERO)

    def add_item(self, product_id: str = "", quantity: int = 1, width=ZERO, height=ZERO) -> OrderItem:
        item = OrderItem(
            product_id=product_id,
            quantity=quantity,
            width=Decimal(str(width)),
            height=Decimal(str(height)),
        )
        self._items.append(item)
        self._recompute()
        return item

    def update_item(self, index: int, **changes) -> OrderItem:
        current = self._items[index]
        values = current.to_dict()
        values.update(changes)
        item = OrderItem.from_dict(values)
        self._items[index] = item
        self._recompute()
        return item

    def remove_item(self, index: int) -> OrderItem:
        removed = self._items.pop(index)
        self._recompute()
        return removed

    def replace_items(self, items: Iterable[OrderItem]) -> None:
        self._items = list(items)
        self._recompute()

    def on_products(self, snapshot: Iterable[ProductRecord]) -> None:
        """Products subscription callback: reprice against the new catalog."""
        self._products = index_products(snapshot)
        self._recompute()

    def watch(self, store: DocumentStore) -> "OrderDraft":
        """Keep this draft priced against the live products collection."""
        self.unwatch()
        self._subscription = store.subscribe("products", self.on_products)
        return self

    def unwatch(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def to_dict(self) -> dict:
        return {
            "id": self.order_id,
            "customer_name": self.customer_name,
            "items": [
                {**item.to_dict(), "price": price}
                for item, price in zip(self._items, self.line_prices)
            ],
            "total_cost": self.total_cost,
        }


def editable_view(order: OrderRecord) -> dict:
    """Order as shown in the edit form: everything except the payment fields."""
    view = order.to_dict()
    for field in PAYMENT_FIELDS:
        view.pop(field, None)
    return view


def _saved_total(store: DocumentStore, draft: OrderDraft) -> Decimal:
    # Reprice against the catalog as it is at save time; the draft keeps its own snapshot
    catalog = index_products(store.read_all("products"))
    return round_amount(order_total(draft.items, catalog))


def create_order(
    store: DocumentStore,
    draft: OrderDraft,
    actor: AccountRecord | None,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> OrderRecord:
    """
    Persist a draft as a new unpaid order.

    Raises:
        PermissionDeniedError: actor may not create orders
        ValidationError: customer name missing
        OrderIdCollisionError: no free identifier after the configured attempts
        StoreError: the store rejected the write (draft is untouched, retry is safe)
    """
    authorize(actor, "CREATE_ORDER")
    customer_name = require_customer_name(draft.customer_name)
    total = _saved_total(store, draft)
    created_at = now or localnow()
    attempts = current_app.config.get("ORDER_ID_MAX_ATTEMPTS", 5)

    for _ in range(attempts):
        order_id = generate_order_id(created_at, rng)
        if store.get("orders", order_id) is not None:
            continue
        try:
            store.create(
                "orders",
                {
                    "customer_name": customer_name,
                    "items": list(draft.items),
                    "total_cost": total,
                    "payment_status": PAYMENT_STATUS_UNPAID,
                    "payment_method": "",
                    "paid_amount": ZERO,
                    "created_at": created_at,
                },
                doc_id=order_id,
            )
        except DuplicateDocumentError:
            # Lost a race for the same id
            continue
        current_app.logger.info("Created order %s for %s (total %s)", order_id, customer_name, total)
        return store.get("orders", order_id)

    raise OrderIdCollisionError(f"Could not allocate a unique order id after {attempts} attempts")


def edit_order(
    store: DocumentStore,
    order_id: str,
    draft: OrderDraft,
    actor: AccountRecord | None,
    *,
    now: datetime | None = None,
    expected_version: int | None = None,
) -> OrderRecord | None:
    """
    Write back customer name and items, recompute the total, stamp updated_at.
    Payment fields are left as they are. Returns None if the order is gone.
    """
    authorize(actor, "EDIT_ORDER")
    customer_name = require_customer_name(draft.customer_name)
    if store.get("orders", order_id) is None:
        return None

    total = _saved_total(store, draft)
    return store.update(
        "orders",
        order_id,
        {
            "customer_name": customer_name,
            "items": list(draft.items),
            "total_cost": total,
            "updated_at": now or localnow(),
        },
        expected_version=expected_version,
    )


def delete_order(store: DocumentStore, order_id: str, actor: AccountRecord | None) -> bool:
    """Permanently delete an order. Supervisor or owner only."""
    authorize(actor, "DELETE_ORDER")
    deleted = store.delete("orders", order_id)
    if deleted:
        current_app.logger.info("Order %s deleted by %s", order_id, actor.username)
    return deleted


def get_order(store: DocumentStore, order_id: str, actor: AccountRecord | None) -> OrderRecord | None:
    authorize(actor, "VIEW_ORDERS")
    return store.get("orders", order_id)


def list_orders(store: DocumentStore, actor: AccountRecord | None) -> list[OrderRecord]:
    """All orders, newest first."""
    authorize(actor, "VIEW_ORDERS")
    orders = store.read_all("orders")
    return sorted(orders, key=lambda o: (o.created_at, o.id), reverse=True)
