# Overview: Flask API routes for orders operations; parses input and returns JSON responses.

"""
Order routes.

Request body for create/update/quote:
{
    "customer_name": "Budi",
    "items": [
        {"product_id": "abc", "quantity": 1, "width": "2", "height": "1.5"},
        {"product_id": "def", "quantity": 3}
    ],
    "version": 2  (update only, optional; rejects the write if the order changed)
}

Totals are always computed server-side from the current products; a
total_cost in the body is ignored.
"""

from flask import Blueprint, Response, current_app, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..document_store import StoreError
from ..extensions import get_store
from ..permissions import PermissionDeniedError
from ..services import order_service, receipt_service
from ..services.order_service import OrderDraft, OrderIdCollisionError
from ..validation import ConflictError, ValidationError, parse_order_items


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _draft_from_payload(payload: dict) -> OrderDraft:
    return OrderDraft(
        customer_name=payload.get("customer_name") or "",
        items=parse_order_items(payload.get("items")),
        products=get_store().read_all("products"),
    )


# =============================================================================
# ORDER QUERIES
# =============================================================================

@orders_bp.get("")
@require_auth
@require_permission("VIEW_ORDERS")
def list_orders_route():
    """All orders, newest first."""
    orders = order_service.list_orders(get_store(), g.current_user)
    return jsonify({"orders": [o.to_dict() for o in orders]}), 200


@orders_bp.get("/<order_id>")
@require_auth
@require_permission("VIEW_ORDERS")
def get_order_route(order_id: str):
    order = order_service.get_order(get_store(), order_id, g.current_user)
    if order is None:
        return jsonify({"error": "Order not found"}), 404
    return jsonify({"order": order.to_dict()}), 200


@orders_bp.get("/<order_id>/edit")
@require_auth
@require_permission("EDIT_ORDER")
def editable_order_route(order_id: str):
    """Order as loaded into the edit form (payment fields omitted)."""
    order = order_service.get_order(get_store(), order_id, g.current_user)
    if order is None:
        return jsonify({"error": "Order not found"}), 404
    return jsonify({"order": order_service.editable_view(order)}), 200


@orders_bp.get("/<order_id>/receipt")
@require_auth
@require_permission("PRINT_RECEIPT")
def order_receipt_route(order_id: str):
    """
    Printable receipt.

    Query params:
    - format: "html" (default) or "json"
    """
    fmt = request.args.get("format", "html").lower()
    if fmt not in ("html", "json"):
        return jsonify({"error": "format must be html or json"}), 400

    receipt = receipt_service.order_receipt(get_store(), order_id, g.current_user)
    if receipt is None:
        return jsonify({"error": "Order not found"}), 404

    if fmt == "json":
        return jsonify({"receipt": receipt.to_dict()}), 200
    return Response(receipt_service.render_receipt_html(receipt), mimetype="text/html")


# =============================================================================
# ORDER WRITES
# =============================================================================

@orders_bp.post("/quote")
@require_auth
@require_permission("CREATE_ORDER")
def quote_order_route():
    """Price a draft without saving it."""
    payload = request.get_json(silent=True) or {}
    try:
        draft = _draft_from_payload(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"draft": draft.to_dict()}), 200


@orders_bp.post("")
@require_auth
@require_permission("CREATE_ORDER")
def create_order_route():
    """
    Save a new order as UNPAID.

    Returns:
        201: Order created
        400: Missing customer name or malformed items
        503: Store unavailable; resubmit the same body
    """
    payload = request.get_json(silent=True) or {}
    try:
        draft = _draft_from_payload(payload)
        order = order_service.create_order(get_store(), draft, g.current_user)
        return jsonify({"order": order.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PermissionDeniedError as e:
        return jsonify({"error": "Permission denied", "message": str(e)}), 403
    except OrderIdCollisionError as e:
        return jsonify({"error": str(e)}), 503
    except StoreError as e:
        return jsonify({"error": str(e)}), 503
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.put("/<order_id>")
@require_auth
@require_permission("EDIT_ORDER")
def update_order_route(order_id: str):
    """Replace customer name and items. Payment fields in the body are ignored."""
    payload = request.get_json(silent=True) or {}
    version = payload.get("version")
    if version is not None and (not isinstance(version, int) or isinstance(version, bool)):
        return jsonify({"error": "version must be an integer"}), 400

    try:
        draft = _draft_from_payload(payload)
        order = order_service.edit_order(
            get_store(), order_id, draft, g.current_user, expected_version=version
        )
        if order is None:
            return jsonify({"error": "Order not found"}), 404
        return jsonify({"order": order.to_dict()}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PermissionDeniedError as e:
        return jsonify({"error": "Permission denied", "message": str(e)}), 403
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except StoreError as e:
        return jsonify({"error": str(e)}), 503
    except Exception:
        current_app.logger.exception("Failed to update order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.delete("/<order_id>")
@require_auth
@require_permission("DELETE_ORDER")
def delete_order_route(order_id: str):
    try:
        deleted = order_service.delete_order(get_store(), order_id, g.current_user)
    except StoreError as e:
        return jsonify({"error": str(e)}), 503

    if not deleted:
        return jsonify({"error": "Order not found"}), 404
    return jsonify({"ok": True}), 200
