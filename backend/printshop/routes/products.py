# Overview: Flask API routes for products operations; parses input and returns JSON responses.

"""
Product catalog routes.

SECURITY: All routes require authentication.
- Read operations require VIEW_PRODUCTS permission
- Write operations require MANAGE_PRODUCTS permission

Changing a product re-prices open drafts but never rewrites the total_cost
of saved orders.
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..document_store import StoreError
from ..extensions import get_store
from ..services import products_service
from ..validation import ConflictError, ValidationError


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_products():
    products = products_service.list_products(get_store(), g.current_user)
    return jsonify({"products": [p.to_dict() for p in products]}), 200


@products_bp.post("")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def create_product_route():
    """Body: {"name": "Banner", "unit_price": "25000", "calculation_method": "by_area"}"""
    payload = request.get_json(silent=True) or {}
    try:
        created = products_service.create_product(get_store(), payload, g.current_user)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except StoreError as e:
        return jsonify({"error": str(e)}), 503
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"product": created.to_dict()}), 201


@products_bp.put("/<product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def update_product_route(product_id: str):
    """Partial update; optional "version" rejects the write if the product changed."""
    payload = dict(request.get_json(silent=True) or {})
    version = payload.pop("version", None)
    if version is not None and (not isinstance(version, int) or isinstance(version, bool)):
        return jsonify({"error": "version must be an integer"}), 400

    try:
        updated = products_service.update_product(
            get_store(), product_id, payload, g.current_user, expected_version=version
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except StoreError as e:
        return jsonify({"error": str(e)}), 503

    if updated is None:
        return jsonify({"error": "Product not found"}), 404
    return jsonify({"product": updated.to_dict()}), 200


@products_bp.delete("/<product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
def delete_product_route(product_id: str):
    try:
        deleted = products_service.delete_product(get_store(), product_id, g.current_user)
    except StoreError as e:
        return jsonify({"error": str(e)}), 503

    if not deleted:
        return jsonify({"error": "Product not found"}), 404
    return jsonify({"ok": True}), 200
