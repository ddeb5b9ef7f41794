# Overview: Service-layer receipt generation; pure function of order, products and store profile.

"""
Receipt Service

build_receipt() derives everything printed on the 80mm slip from an order,
the products snapshot and the store profile. Exactly one of change or
outstanding balance is set, and neither when paid_amount == total_cost.
render_receipt_html() turns that into printable markup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from jinja2 import Environment, PackageLoader, select_autoescape

from ..document_store import DocumentStore
from ..permissions import authorize
from ..records import AccountRecord, OrderRecord, ProductRecord, StoreSettingsRecord, PAYMENT_STATUS_PAID
from .payment_service import settlement_balance
from .pricing_service import index_products, price_item, round_amount
from .settings_service import ensure_store_settings


UNRESOLVED_PRODUCT_NAME = "N/A"

_STATUS_LABELS = {
    PAYMENT_STATUS_PAID: "Lunas",
}
_UNPAID_LABEL = "Belum Lunas"

_env = Environment(
    loader=PackageLoader("printshop", "templates"),
    autoescape=select_autoescape(["html"]),
)


def format_rupiah(amount: Decimal) -> str:
    """Rp with dot thousands separators; cents only when present (Rp 1.234,50)."""
    amount = round_amount(amount)
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    whole = int(amount)
    cents = int((amount - whole) * 100)
    text = f"{whole:,}".replace(",", ".")
    if cents:
        text = f"{text},{cents:02d}"
    return f"Rp {sign}{text}"


@dataclass(frozen=True)
class ReceiptLine:
    name: str
    quantity: int
    price: Decimal


@dataclass(frozen=True)
class Receipt:
    store_name: str
    address: str
    phone: str
    logo_url: str
    notes: str
    order_id: str
    customer_name: str
    created_at: datetime | None
    lines: tuple[ReceiptLine, ...] = field(default_factory=tuple)
    total_cost: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    payment_status: str = ""
    payment_method: str = ""
    change: Decimal | None = None
    outstanding: Decimal | None = None

    @property
    def status_label(self) -> str:
        return _STATUS_LABELS.get(self.payment_status, _UNPAID_LABEL)

    def to_dict(self) -> dict:
        return {
            "store": {
                "name": self.store_name,
                "address": self.address,
                "phone": self.phone,
                "logo_url": self.logo_url,
                "notes": self.notes,
            },
            "order_id": self.order_id,
            "customer_name": self.customer_name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "lines": [
                {"name": line.name, "quantity": line.quantity, "price": line.price}
                for line in self.lines
            ],
            "total_cost": self.total_cost,
            "paid_amount": self.paid_amount,
            "payment_status": self.payment_status,
            "payment_method": self.payment_method,
            "change": self.change,
            "outstanding": self.outstanding,
        }


def build_receipt(
    order: OrderRecord,
    products: Iterable[ProductRecord],
    settings: StoreSettingsRecord | None,
) -> Receipt:
    settings = settings or StoreSettingsRecord()
    catalog = index_products(products)

    lines = []
    for item in order.items:
        product = catalog.get(item.product_id)
        lines.append(ReceiptLine(
            name=product.name if product else UNRESOLVED_PRODUCT_NAME,
            quantity=item.quantity,
            price=price_item(item, product),
        ))

    change, outstanding = settlement_balance(order.total_cost, order.paid_amount)

    return Receipt(
        store_name=settings.store_name,
        address=settings.address,
        phone=settings.phone,
        logo_url=settings.logo_url,
        notes=settings.receipt_notes,
        order_id=order.id,
        customer_name=order.customer_name,
        created_at=order.created_at,
        lines=tuple(lines),
        total_cost=order.total_cost,
        paid_amount=order.paid_amount,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        change=change if change > 0 else None,
        outstanding=outstanding if outstanding > 0 else None,
    )


def render_receipt_html(receipt: Receipt) -> str:
    template = _env.get_template("receipt.html")
    return template.render(receipt=receipt, rupiah=format_rupiah)


def order_receipt(store: DocumentStore, order_id: str, actor: AccountRecord | None) -> Receipt | None:
    """Receipt for a saved order against the current catalog and store profile."""
    authorize(actor, "PRINT_RECEIPT")
    order = store.get("orders", order_id)
    if order is None:
        return None
    return build_receipt(order, store.read_all("products"), ensure_store_settings(store))
