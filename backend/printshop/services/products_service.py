# Overview: Service-layer operations for the product catalog.

from __future__ import annotations

from datetime import datetime

from ..document_store import DocumentStore
from ..models import Product
from ..permissions import authorize
from ..records import AccountRecord, ProductRecord
from ..validation import ModelValidationPolicy, enforce_rules_product, validate_payload
from printshop.time_utils import localnow


PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "unit_price", "calculation_method"},
    required_on_create={"name", "unit_price", "calculation_method"},
)


def list_products(store: DocumentStore, actor: AccountRecord | None) -> list[ProductRecord]:
    authorize(actor, "VIEW_PRODUCTS")
    return sorted(store.read_all("products"), key=lambda p: p.name.lower())


def get_product(store: DocumentStore, product_id: str, actor: AccountRecord | None) -> ProductRecord | None:
    authorize(actor, "VIEW_PRODUCTS")
    return store.get("products", product_id)


def create_product(
    store: DocumentStore,
    payload: dict,
    actor: AccountRecord | None,
    now: datetime | None = None,
) -> ProductRecord:
    authorize(actor, "MANAGE_PRODUCTS")
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)
    patch["created_at"] = now or localnow()
    product_id = store.create("products", patch)
    return store.get("products", product_id)


def update_product(
    store: DocumentStore,
    product_id: str,
    payload: dict,
    actor: AccountRecord | None,
    now: datetime | None = None,
    expected_version: int | None = None,
) -> ProductRecord | None:
    """
    Partial update. Saved orders keep the totals they were saved with.
    Returns None when the product no longer exists.
    """
    authorize(actor, "MANAGE_PRODUCTS")
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    enforce_rules_product(patch)
    patch["updated_at"] = now or localnow()
    return store.update("products", product_id, patch, expected_version=expected_version)


def delete_product(store: DocumentStore, product_id: str, actor: AccountRecord | None) -> bool:
    """Lines of existing orders that reference the product price to 0 afterwards."""
    authorize(actor, "MANAGE_PRODUCTS")
    return store.delete("products", product_id)
