from __future__ import annotations
from decimal import Decimal, InvalidOperation

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .records import CALCULATION_METHODS, OrderItem


# Maximum amount: Rp 999,999,999,999.99 (fits Numeric(14, 2))
MAX_AMOUNT = Decimal("999999999999.99")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate username, stale version)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def to_decimal(value: Any, field: str) -> Decimal:
    """Coerce a JSON number or numeric string into a finite Decimal."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{field} must be a number")
    else:
        raise ValidationError(f"{field} must be a number")
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return result


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Decimal amounts (unit_price, cost)
    if isinstance(coltype, Numeric):
        return to_decimal(value, col.key)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def _enforce_amount(patch: dict, field: str) -> None:
    if field in patch and patch[field] is not None:
        amount = patch[field]
        if amount < 0:
            raise ValidationError(f"{field} must be >= 0")
        if amount > MAX_AMOUNT:
            raise ValidationError(f"{field} cannot exceed {MAX_AMOUNT}")


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    _enforce_amount(patch, "unit_price")
    method = patch.get("calculation_method")
    if method is not None and method not in CALCULATION_METHODS:
        raise ValidationError(
            f"calculation_method must be one of {', '.join(CALCULATION_METHODS)}"
        )


def enforce_rules_expense(patch: dict) -> None:
    _enforce_amount(patch, "cost")


def require_customer_name(value: Any) -> str:
    name = str(value or "").strip()
    if not name:
        raise ValidationError("customer_name is required")
    if len(name) > 255:
        raise ValidationError("customer_name exceeds max length 255")
    return name


def parse_order_items(raw_items: Any) -> list[OrderItem]:
    """
    Validate the item list of an order payload.

    quantity must be an integer >= 1. width/height are accepted as-is (zero
    or negative dimensions simply price to zero or below). An unknown
    product_id is not an error here: it prices to 0.
    """
    if raw_items is None:
        return []
    if not isinstance(raw_items, list):
        raise ValidationError("items must be a list")

    items: list[OrderItem] = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{index}] must be an object")

        unknown = set(raw) - {"product_id", "quantity", "width", "height"}
        if unknown:
            raise ValidationError(f"items[{index}] has unknown fields: {', '.join(sorted(unknown))}")

        product_id = raw.get("product_id")
        if product_id is None:
            product_id = ""
        if not isinstance(product_id, str):
            raise ValidationError(f"items[{index}].product_id must be a string")

        quantity = raw.get("quantity", 1)
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError(f"items[{index}].quantity must be an integer")
        if quantity < 1:
            raise ValidationError(f"items[{index}].quantity must be >= 1")

        items.append(OrderItem(
            product_id=product_id,
            quantity=quantity,
            width=to_decimal(raw.get("width", 0), f"items[{index}].width"),
            height=to_decimal(raw.get("height", 0), f"items[{index}].height"),
        ))
    return items
