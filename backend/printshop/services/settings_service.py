# Overview: Service-layer operations for the store profile singleton.

from __future__ import annotations

import re
from datetime import datetime

from ..document_store import DocumentStore
from ..models import StoreSettings
from ..permissions import authorize
from ..records import AccountRecord, StoreSettingsRecord
from ..validation import ModelValidationPolicy, ValidationError, validate_payload
from printshop.time_utils import localnow


DEFAULT_STORE_SETTINGS = {
    "store_name": "Toko Printing Anda",
    "address": "Jl. Contoh No. 123",
    "phone": "081234567890",
    "receipt_notes": "Terima kasih atas kunjungan Anda!",
    "logo_url": "https://placehold.co/200x100/000000/FFFFFF?text=Logo",
}

SETTINGS_POLICY = ModelValidationPolicy(
    writable_fields={"store_name", "address", "phone", "receipt_notes", "logo_url"},
)

LOGO_RE = re.compile(r"^(https?://\S+|data:image/[a-zA-Z0-9.+-]+;base64,[A-Za-z0-9+/=\s]+)$")

# data: URIs of uploaded images, about 1.5 MB of encoded text
MAX_LOGO_LENGTH = 2_000_000


def enforce_rules_store_settings(patch: dict) -> None:
    logo = patch.get("logo_url")
    if logo:
        if len(logo) > MAX_LOGO_LENGTH:
            raise ValidationError("logo_url is too large")
        if not LOGO_RE.match(logo):
            raise ValidationError("logo_url must be an http(s) URL or a data:image base64 URI")


def ensure_store_settings(store: DocumentStore) -> StoreSettingsRecord:
    """Read the settings singleton, creating it with defaults when absent."""
    settings = store.get_settings()
    if settings is None:
        settings = store.upsert_settings(dict(DEFAULT_STORE_SETTINGS), merge=True)
    return settings


def get_store_settings(store: DocumentStore, actor: AccountRecord | None) -> StoreSettingsRecord:
    authorize(actor, "VIEW_STORE_SETTINGS")
    return ensure_store_settings(store)


def update_store_settings(
    store: DocumentStore,
    payload: dict,
    actor: AccountRecord | None,
    now: datetime | None = None,
) -> StoreSettingsRecord:
    """Merge the given fields into the store profile. Owner only."""
    authorize(actor, "MANAGE_STORE_SETTINGS")
    patch = validate_payload(model=StoreSettings, payload=payload, policy=SETTINGS_POLICY, partial=True)
    enforce_rules_store_settings(patch)
    ensure_store_settings(store)
    patch["updated_at"] = now or localnow()
    return store.upsert_settings(patch, merge=True)
