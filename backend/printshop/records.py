# Overview: Immutable snapshot records handed from the document store to the engines.

"""
Snapshot records.

The document store never hands ORM rows to the pricing, order, settlement or
reporting code. Every read is converted into one of these frozen dataclasses,
so a snapshot stays valid after the session that produced it is gone and the
engines can be exercised without a database.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from .time_utils import to_iso


PAYMENT_STATUS_UNPAID = "UNPAID"
PAYMENT_STATUS_PAID = "PAID"

METHOD_BY_AREA = "by_area"
METHOD_BY_PACKAGE = "by_package"
METHOD_BY_UNIT = "by_unit"
CALCULATION_METHODS = (METHOD_BY_AREA, METHOD_BY_PACKAGE, METHOD_BY_UNIT)


def _decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class ProductRecord:
    id: str
    name: str
    unit_price: Decimal
    calculation_method: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 1

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "unit_price": self.unit_price,
            "calculation_method": self.calculation_method,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
            "version": self.version,
        }


@dataclass(frozen=True)
class OrderItem:
    """One line of an order. Lives only inside the order's encoded item list."""
    product_id: str
    quantity: int = 1
    width: Decimal = Decimal("0")
    height: Decimal = Decimal("0")

    @classmethod
    def from_dict(cls, data: dict) -> "OrderItem":
        return cls(
            product_id=str(data.get("product_id") or ""),
            quantity=int(data.get("quantity", 1)),
            width=_decimal(data.get("width")),
            height=_decimal(data.get("height")),
        )

    def to_dict(self) -> dict:
        # Decimals as strings: this is also the embedded storage encoding
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "width": str(self.width),
            "height": str(self.height),
        }


@dataclass(frozen=True)
class OrderRecord:
    id: str
    customer_name: str
    items: tuple[OrderItem, ...] = ()
    total_cost: Decimal = Decimal("0")
    payment_status: str = PAYMENT_STATUS_UNPAID
    payment_method: str = ""
    paid_amount: Decimal = Decimal("0")
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 1

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PAYMENT_STATUS_PAID

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "items": [item.to_dict() for item in self.items],
            "total_cost": self.total_cost,
            "payment_status": self.payment_status,
            "payment_method": self.payment_method,
            "paid_amount": self.paid_amount,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
            "version": self.version,
        }


@dataclass(frozen=True)
class ExpenseRecord:
    id: str
    description: str
    cost: Decimal
    created_at: datetime | None = None
    version: int = 1

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "cost": self.cost,
            "created_at": to_iso(self.created_at),
            "version": self.version,
        }


@dataclass(frozen=True)
class AccountRecord:
    id: str
    username: str
    role: str
    password_hash: str = field(default="", repr=False)
    session_identity_hash: str | None = field(default=None, repr=False)
    created_at: datetime | None = None
    version: int = 1

    @property
    def is_logged_in(self) -> bool:
        return self.session_identity_hash is not None

    def to_dict(self) -> dict:
        # Never expose password or session hashes
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "logged_in": self.is_logged_in,
            "created_at": to_iso(self.created_at),
        }


@dataclass(frozen=True)
class StoreSettingsRecord:
    store_name: str = ""
    address: str = ""
    phone: str = ""
    receipt_notes: str = ""
    logo_url: str = ""
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "store_name": self.store_name,
            "address": self.address,
            "phone": self.phone,
            "receipt_notes": self.receipt_notes,
            "logo_url": self.logo_url,
            "updated_at": to_iso(self.updated_at),
        }
