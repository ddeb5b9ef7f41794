# Overview: Flask API routes for payment settlement; order search and paid amount entry.

"""
Payment Settlement API Routes

Settlement is one order at a time: search, pick, enter the amount handed over.

SECURITY:
- SETTLE_PAYMENT permission required (cashier, owner)
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..document_store import StoreError
from ..extensions import get_store
from ..services import payment_service
from ..validation import ValidationError


payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


@payments_bp.get("/search")
@require_auth
@require_permission("SETTLE_PAYMENT")
def search_orders_route():
    """
    Query params:
    - q: case-insensitive substring of order id or customer name (empty: all)
    """
    query = request.args.get("q", "")
    orders = payment_service.find_orders(get_store(), query, g.current_user)
    return jsonify({"orders": [o.to_dict() for o in orders]}), 200


@payments_bp.post("/<order_id>/settle")
@require_auth
@require_permission("SETTLE_PAYMENT")
def settle_order_route(order_id: str):
    """
    Record a payment.

    Request body:
    {
        "paid_amount": "100000"
    }

    Returns:
        200: order with derived change / outstanding balance
        400: paid_amount missing or negative
        404: order not found
        503: store unavailable, nothing changed
    """
    data = request.get_json(silent=True) or {}
    if "paid_amount" not in data:
        return jsonify({"error": "paid_amount required"}), 400

    try:
        settlement = payment_service.settle_order(
            get_store(), order_id, data["paid_amount"], g.current_user
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except StoreError as e:
        return jsonify({"error": str(e)}), 503
    except Exception:
        current_app.logger.exception("Failed to settle order")
        return jsonify({"error": "Internal server error"}), 500

    if settlement is None:
        return jsonify({"error": "Order not found"}), 404
    return jsonify(settlement.to_dict()), 200
