# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .extensions import get_store
from .permissions import has_permission
from .services import auth_service


def _bearer_identity() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a bound session identity.

    Sets the following Flask g attributes:
    - g.current_user: AccountRecord bound to the identity
    - g.session_identity: the raw identity from the Authorization header

    Returns 401 if the header is missing or no account holds the identity
    (logged out, or another account logged in with it since).
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        identity = _bearer_identity()
        if identity is None:
            return jsonify({"error": "Authentication required"}), 401

        account = auth_service.account_for_session(get_store(), identity)
        if account is None:
            return jsonify({"error": "Invalid or expired session"}), 401

        g.current_user = account
        g.session_identity = identity

        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require a specific permission of the logged-in account's role.

    Services check again with permissions.authorize(); this only turns the
    common case into a 403 before any work is done.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not hasattr(g, "current_user"):
                return jsonify({"error": "Authentication required"}), 401

            if not has_permission(g.current_user, permission_code):
                return jsonify({
                    "error": "Permission denied",
                    "required_permission": permission_code,
                    "message": f"Role {g.current_user.role} lacks permission {permission_code}",
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
