from __future__ import annotations

from ..extensions import db
from ..records import ProductRecord, METHOD_BY_UNIT
from printshop.time_utils import localnow


class Product(db.Model):
    """
    Printable product with its pricing rule.

    Editing a product never touches saved orders: order totals are
    snapshotted when the order is saved.
    """
    __tablename__ = "products"

    id = db.Column(db.String(32), primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    # Price per cm² for by_area, per package/unit otherwise
    unit_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    calculation_method = db.Column(db.String(16), nullable=False, default=METHOD_BY_UNIT)

    created_at = db.Column(db.DateTime, nullable=False, default=localnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=True)
    version = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    def to_record(self) -> ProductRecord:
        return ProductRecord(
            id=self.id,
            name=self.name,
            unit_price=self.unit_price,
            calculation_method=self.calculation_method,
            created_at=self.created_at,
            updated_at=self.updated_at,
            version=self.version,
        )
