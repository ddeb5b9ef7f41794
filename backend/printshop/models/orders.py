from __future__ import annotations

import json

from ..extensions import db
from ..records import OrderRecord, OrderItem, PAYMENT_STATUS_UNPAID
from printshop.time_utils import localnow


class Order(db.Model):
    """
    Customer order.

    Items are embedded as an encoded JSON list, never stored in their own
    table. total_cost is the sum of item prices at save time; the payment
    fields are written only by settlement.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_status_created", "payment_status", "created_at"),
    )

    # Human-readable id, e.g. "P-20261018-093015-482913"
    id = db.Column(db.String(64), primary_key=True)
    customer_name = db.Column(db.String(255), nullable=False, index=True)

    items_json = db.Column(db.Text, nullable=False, default="[]")
    total_cost = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    payment_status = db.Column(db.String(16), nullable=False, default=PAYMENT_STATUS_UNPAID)
    payment_method = db.Column(db.String(32), nullable=False, default="")
    paid_amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=localnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=True)
    version = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    # Writable through the document store in addition to the columns
    DOCUMENT_FIELDS = {"items"}

    @property
    def items(self) -> list[OrderItem]:
        return [OrderItem.from_dict(raw) for raw in json.loads(self.items_json or "[]")]

    @items.setter
    def items(self, value) -> None:
        encoded = []
        for item in value or []:
            if not isinstance(item, OrderItem):
                item = OrderItem.from_dict(item)
            encoded.append(item.to_dict())
        self.items_json = json.dumps(encoded)

    def to_record(self) -> OrderRecord:
        return OrderRecord(
            id=self.id,
            customer_name=self.customer_name,
            items=tuple(self.items),
            total_cost=self.total_cost,
            payment_status=self.payment_status,
            payment_method=self.payment_method,
            paid_amount=self.paid_amount,
            created_at=self.created_at,
            updated_at=self.updated_at,
            version=self.version,
        )
