# Overview: Flask API routes for expenses operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..document_store import StoreError
from ..extensions import get_store
from ..services import expense_service
from ..validation import ValidationError


expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.get("")
@require_auth
@require_permission("VIEW_EXPENSES")
def list_expenses_route():
    expenses = expense_service.list_expenses(get_store(), g.current_user)
    return jsonify({"expenses": [e.to_dict() for e in expenses]}), 200


@expenses_bp.post("")
@require_auth
@require_permission("CREATE_EXPENSE")
def create_expense_route():
    """Body: {"description": "Tinta", "cost": "150000"}"""
    payload = request.get_json(silent=True) or {}
    try:
        expense = expense_service.create_expense(get_store(), payload, g.current_user)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except StoreError as e:
        return jsonify({"error": str(e)}), 503
    except Exception:
        current_app.logger.exception("Failed to create expense")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"expense": expense.to_dict()}), 201


@expenses_bp.delete("/<expense_id>")
@require_auth
@require_permission("DELETE_EXPENSE")
def delete_expense_route(expense_id: str):
    try:
        deleted = expense_service.delete_expense(get_store(), expense_id, g.current_user)
    except StoreError as e:
        return jsonify({"error": str(e)}), 503

    if not deleted:
        return jsonify({"error": "Expense not found"}), 404
    return jsonify({"ok": True}), 200
