# Overview: Service-layer operations for shop expenses.

from __future__ import annotations

from datetime import datetime

from ..document_store import DocumentStore
from ..models import Expense
from ..permissions import authorize
from ..records import AccountRecord, ExpenseRecord
from ..validation import ModelValidationPolicy, enforce_rules_expense, validate_payload
from printshop.time_utils import localnow


EXPENSE_POLICY = ModelValidationPolicy(
    writable_fields={"description", "cost"},
    required_on_create={"description", "cost"},
)


def list_expenses(store: DocumentStore, actor: AccountRecord | None) -> list[ExpenseRecord]:
    """All expenses, newest first."""
    authorize(actor, "VIEW_EXPENSES")
    expenses = store.read_all("expenses")
    return sorted(expenses, key=lambda e: (e.created_at, e.id), reverse=True)


def create_expense(
    store: DocumentStore,
    payload: dict,
    actor: AccountRecord | None,
    now: datetime | None = None,
) -> ExpenseRecord:
    authorize(actor, "CREATE_EXPENSE")
    patch = validate_payload(model=Expense, payload=payload, policy=EXPENSE_POLICY, partial=False)
    enforce_rules_expense(patch)
    patch["created_at"] = now or localnow()
    expense_id = store.create("expenses", patch)
    return store.get("expenses", expense_id)


def delete_expense(store: DocumentStore, expense_id: str, actor: AccountRecord | None) -> bool:
    authorize(actor, "DELETE_EXPENSE")
    return store.delete("expenses", expense_id)
