from __future__ import annotations

from ..extensions import db
from ..records import ExpenseRecord
from printshop.time_utils import localnow


class Expense(db.Model):
    """Shop expense. Immutable once recorded; it can only be deleted."""
    __tablename__ = "expenses"

    id = db.Column(db.String(32), primary_key=True)
    description = db.Column(db.String(255), nullable=False)
    cost = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=localnow, index=True)
    version = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    def to_record(self) -> ExpenseRecord:
        return ExpenseRecord(
            id=self.id,
            description=self.description,
            cost=self.cost,
            created_at=self.created_at,
            version=self.version,
        )
