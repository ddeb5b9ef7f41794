# Overview: Flask API routes for staff account management; owner only.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..document_store import StoreError
from ..extensions import get_store
from ..services import auth_service
from ..validation import ConflictError, ValidationError


accounts_bp = Blueprint("accounts", __name__, url_prefix="/api/accounts")


@accounts_bp.get("")
@require_auth
@require_permission("MANAGE_ACCOUNTS")
def list_accounts_route():
    accounts = auth_service.list_accounts(get_store(), g.current_user)
    return jsonify({"accounts": [a.to_dict() for a in accounts]}), 200


@accounts_bp.post("")
@require_auth
@require_permission("MANAGE_ACCOUNTS")
def create_account_route():
    """
    Request body:
    {
        "username": "kasir1",
        "password": "rahasia123",
        "role": "cashier"
    }
    """
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")
    role = data.get("role")

    if not all([username, password, role]):
        return jsonify({"error": "username, password, and role required"}), 400

    try:
        account = auth_service.create_account(get_store(), username, password, role, g.current_user)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except StoreError as e:
        return jsonify({"error": str(e)}), 503
    except Exception:
        current_app.logger.exception("Failed to create account")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"account": account.to_dict()}), 201


@accounts_bp.delete("/<account_id>")
@require_auth
@require_permission("MANAGE_ACCOUNTS")
def delete_account_route(account_id: str):
    try:
        deleted = auth_service.delete_account(get_store(), account_id, g.current_user)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except StoreError as e:
        return jsonify({"error": str(e)}), 503

    if not deleted:
        return jsonify({"error": "Account not found"}), 404
    return jsonify({"ok": True}), 200
