from __future__ import annotations

from ..extensions import db
from ..records import AccountRecord
from printshop.time_utils import localnow


class Account(db.Model):
    """
    Staff account.

    session_identity_hash is the SHA-256 of the session identity the account
    is currently bound to (NULL when logged out). The unique constraint keeps
    one identity from being bound to two accounts.
    """
    __tablename__ = "users"

    id = db.Column(db.String(32), primary_key=True)
    username = db.Column(db.String(64), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    # cashier, designer, supervisor, owner
    role = db.Column(db.String(16), nullable=False, index=True)

    session_identity_hash = db.Column(db.String(64), nullable=True, unique=True)

    created_at = db.Column(db.DateTime, nullable=False, default=localnow, index=True)
    version = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

    def to_record(self) -> AccountRecord:
        return AccountRecord(
            id=self.id,
            username=self.username,
            role=self.role,
            password_hash=self.password_hash,
            session_identity_hash=self.session_identity_hash,
            created_at=self.created_at,
            version=self.version,
        )
