# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

SESSION MODEL:
- The client may send its own session_identity (a stable per-device id) or
  let the server generate one.
- The identity is returned once and used as the Bearer token afterwards.
- One identity maps to at most one account; logging in as someone else on
  the same device logs the previous account out.
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth
from ..document_store import StoreError
from ..extensions import get_store
from ..permissions import get_role_permissions
from ..services import auth_service


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Check credentials and bind the session identity.

    Request body:
    {
        "username": "kasir1",
        "password": "...",
        "session_identity": "optional-client-id"
    }
    """
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        password = data.get("password")
        session_identity = data.get("session_identity")

        if not all([username, password]):
            return jsonify({"error": "username and password required"}), 400
        if session_identity is not None and not isinstance(session_identity, str):
            return jsonify({"error": "session_identity must be a string"}), 400

        store = get_store()
        if current_app.config.get("SEED_DEFAULT_OWNER"):
            auth_service.ensure_default_owner(store)

        result = auth_service.login(store, username, password, session_identity)
        if result is None:
            current_app.logger.info("Failed login for %r from %s", username, request.remote_addr)
            return jsonify({"error": "Invalid credentials"}), 401

        account, identity = result
        current_app.logger.info("User %s logged in", account.username)
        return jsonify({
            "user": account.to_dict(),
            "session_identity": identity,
            "permissions": sorted(get_role_permissions(account.role)),
        }), 200

    except StoreError as e:
        return jsonify({"error": str(e)}), 503
    except Exception:
        current_app.logger.exception("Failed to log in")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    auth_service.logout(get_store(), g.session_identity)
    current_app.logger.info("User %s logged out", g.current_user.username)
    return jsonify({"ok": True}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({
        "user": g.current_user.to_dict(),
        "permissions": sorted(get_role_permissions(g.current_user.role)),
    }), 200
