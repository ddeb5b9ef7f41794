# Overview: Flask API routes for the store profile printed on receipts.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..document_store import StoreError
from ..extensions import get_store
from ..services import settings_service
from ..validation import ValidationError


store_settings_bp = Blueprint("store_settings", __name__, url_prefix="/api/store-settings")


@store_settings_bp.get("")
@require_auth
@require_permission("VIEW_STORE_SETTINGS")
def get_store_settings_route():
    """Store profile; defaults are written on first read."""
    settings = settings_service.get_store_settings(get_store(), g.current_user)
    return jsonify({"settings": settings.to_dict()}), 200


@store_settings_bp.put("")
@require_auth
@require_permission("MANAGE_STORE_SETTINGS")
def update_store_settings_route():
    """
    Merge update. Any subset of store_name, address, phone, receipt_notes,
    logo_url (http(s) URL or data:image/...;base64 URI).
    """
    payload = request.get_json(silent=True) or {}
    try:
        settings = settings_service.update_store_settings(get_store(), payload, g.current_user)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except StoreError as e:
        return jsonify({"error": str(e)}), 503
    return jsonify({"settings": settings.to_dict()}), 200
