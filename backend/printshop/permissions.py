# Overview: Role-to-permission matrix enforced by the services themselves.

"""
Role-based permissions.

WHY: Authorization lives in the service layer, not just in the HTTP routes.
Every service that reads or mutates shop data takes the acting account and
calls authorize() before touching the document store, so a caller that
skips the routes (CLI, scripts, another blueprint) gets the same checks.

ROLES:
- cashier: order intake, payments, expenses
- designer: order intake, product catalog
- supervisor: everything except accounts, payments and store profile
- owner: everything
"""

from __future__ import annotations

from .records import AccountRecord


ROLE_CASHIER = "cashier"
ROLE_DESIGNER = "designer"
ROLE_SUPERVISOR = "supervisor"
ROLE_OWNER = "owner"

ROLES = (ROLE_CASHIER, ROLE_DESIGNER, ROLE_SUPERVISOR, ROLE_OWNER)


PERMISSIONS = {
    "VIEW_ORDERS": "List and open orders",
    "CREATE_ORDER": "Create orders",
    "EDIT_ORDER": "Edit order customer and items",
    "DELETE_ORDER": "Delete orders permanently",
    "PRINT_RECEIPT": "Generate printable receipts",
    "SETTLE_PAYMENT": "Search orders and record payments",
    "VIEW_EXPENSES": "List expenses",
    "CREATE_EXPENSE": "Record expenses",
    "DELETE_EXPENSE": "Delete expenses",
    "VIEW_REPORTS": "View sales, profit and cash-flow reports",
    "EXPORT_REPORTS": "Download report CSV",
    "VIEW_PRODUCTS": "List products",
    "MANAGE_PRODUCTS": "Create, edit and delete products",
    "MANAGE_ACCOUNTS": "Create, list and delete staff accounts",
    "VIEW_STORE_SETTINGS": "Read the store profile",
    "MANAGE_STORE_SETTINGS": "Edit the store profile",
}


_ORDER_DESK = {"VIEW_ORDERS", "CREATE_ORDER", "EDIT_ORDER", "PRINT_RECEIPT", "VIEW_PRODUCTS", "VIEW_STORE_SETTINGS"}

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    ROLE_CASHIER: frozenset(_ORDER_DESK | {
        "SETTLE_PAYMENT",
        "VIEW_EXPENSES",
        "CREATE_EXPENSE",
    }),
    ROLE_DESIGNER: frozenset(_ORDER_DESK | {
        "MANAGE_PRODUCTS",
    }),
    ROLE_SUPERVISOR: frozenset(_ORDER_DESK | {
        "DELETE_ORDER",
        "VIEW_EXPENSES",
        "CREATE_EXPENSE",
        "DELETE_EXPENSE",
        "VIEW_REPORTS",
        "EXPORT_REPORTS",
        "MANAGE_PRODUCTS",
    }),
    ROLE_OWNER: frozenset(PERMISSIONS),
}


class PermissionDeniedError(Exception):
    """Raised when the acting account lacks a permission."""
    def __init__(self, permission_code: str, role: str | None = None):
        super().__init__(f"Role {role or 'anonymous'} lacks permission {permission_code}")
        self.permission_code = permission_code
        self.role = role


def get_role_permissions(role: str | None) -> frozenset[str]:
    return ROLE_PERMISSIONS.get(role or "", frozenset())


def has_permission(actor: AccountRecord | None, permission_code: str) -> bool:
    if actor is None:
        return False
    return permission_code in get_role_permissions(actor.role)


def authorize(actor: AccountRecord | None, permission_code: str) -> None:
    """Raise PermissionDeniedError unless actor's role grants permission_code."""
    if permission_code not in PERMISSIONS:
        raise ValueError(f"Unknown permission: {permission_code}")
    if not has_permission(actor, permission_code):
        raise PermissionDeniedError(permission_code, actor.role if actor else None)


def system_actor() -> AccountRecord:
    """Owner-level actor for CLI maintenance commands."""
    return AccountRecord(id="system", username="system", role=ROLE_OWNER)
