from __future__ import annotations

from ..extensions import db
from ..records import StoreSettingsRecord


class StoreSettings(db.Model):
    """
    Singleton store profile printed on every receipt.

    There is exactly one row (id "main"); it is created lazily with
    defaults the first time anything reads it.
    """
    __tablename__ = "store_settings"

    id = db.Column(db.String(16), primary_key=True, default="main")
    store_name = db.Column(db.String(255), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(64), nullable=True)
    receipt_notes = db.Column(db.Text, nullable=True)

    # URL or data: URI of the uploaded logo
    logo_url = db.Column(db.Text, nullable=True)

    updated_at = db.Column(db.DateTime, nullable=True)

    def to_record(self) -> StoreSettingsRecord:
        return StoreSettingsRecord(
            store_name=self.store_name or "",
            address=self.address or "",
            phone=self.phone or "",
            receipt_notes=self.receipt_notes or "",
            logo_url=self.logo_url or "",
            updated_at=self.updated_at,
        )
