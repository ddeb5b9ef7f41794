# Overview: Service-layer operations for accounts and login; bcrypt hashing and session binding.

"""
Account & Authentication Service

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Minimum 8 characters, at least one letter and one digit
- The session identity is an opaque string supplied by the client (or
  generated here). Only its SHA-256 hash is stored on the account.
- An identity is bound to at most one account: logging in with an identity
  that another account holds unbinds that account first.
"""

import hashlib
import re
import secrets

import bcrypt
from flask import current_app

from ..document_store import DocumentStore, DuplicateDocumentError
from ..permissions import ROLES, ROLE_OWNER, authorize
from ..records import AccountRecord
from ..validation import ConflictError, ValidationError
from printshop.time_utils import localnow


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str) or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """Validate strength, then hash with a fresh bcrypt salt."""
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check. Malformed hashes never verify."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def generate_session_identity() -> str:
    """64-character hex string (32 bytes of entropy)."""
    return secrets.token_hex(32)


def hash_session_identity(identity: str) -> str:
    return hashlib.sha256(identity.encode('utf-8')).hexdigest()


def _clean_username(username) -> str:
    name = str(username or "").strip()
    if not name:
        raise ValidationError("username is required")
    if len(name) > 64:
        raise ValidationError("username exceeds max length 64")
    return name


def _insert_account(store: DocumentStore, username: str, password: str, role: str) -> AccountRecord:
    if role not in ROLES:
        raise ValidationError(f"role must be one of {', '.join(ROLES)}")
    if store.find_one("users", username=username) is not None:
        raise ConflictError(f"Username {username} already exists")

    try:
        account_id = store.create("users", {
            "username": username,
            "password_hash": hash_password(password),
            "role": role,
            "session_identity_hash": None,
            "created_at": localnow(),
        })
    except DuplicateDocumentError:
        raise ConflictError(f"Username {username} already exists")
    return store.get("users", account_id)


def create_account(
    store: DocumentStore,
    username: str,
    password: str,
    role: str,
    actor: AccountRecord | None,
) -> AccountRecord:
    """
    Create a staff account. Owner only.

    Raises:
        ValidationError / PasswordValidationError: bad username, role or password
        ConflictError: username taken
    """
    authorize(actor, "MANAGE_ACCOUNTS")
    account = _insert_account(store, _clean_username(username), password, role)
    current_app.logger.info("Account %s (%s) created by %s", account.username, account.role, actor.username)
    return account


def list_accounts(store: DocumentStore, actor: AccountRecord | None) -> list[AccountRecord]:
    authorize(actor, "MANAGE_ACCOUNTS")
    return store.read_all("users")


def delete_account(store: DocumentStore, account_id: str, actor: AccountRecord | None) -> bool:
    """Delete an account. The acting account cannot delete itself."""
    authorize(actor, "MANAGE_ACCOUNTS")
    if account_id == actor.id:
        raise ValidationError("Cannot delete the account you are logged in with")
    return store.delete("users", account_id)


def ensure_default_owner(store: DocumentStore) -> AccountRecord | None:
    """
    Seed the configured owner account when there are no accounts at all.
    Returns the new account, or None when accounts already exist.
    """
    if store.read_all("users"):
        return None
    username = current_app.config.get("DEFAULT_OWNER_USERNAME", "owner")
    account = _insert_account(
        store,
        username,
        current_app.config["DEFAULT_OWNER_PASSWORD"],
        ROLE_OWNER,
    )
    current_app.logger.warning("No accounts found; created default owner account %r", username)
    return account


def authenticate(store: DocumentStore, username: str, password: str) -> AccountRecord | None:
    account = store.find_one("users", username=str(username or "").strip())
    if account is None:
        return None
    if not verify_password(password, account.password_hash):
        return None
    return account


def login(
    store: DocumentStore,
    username: str,
    password: str,
    session_identity: str | None = None,
) -> tuple[AccountRecord, str] | None:
    """
    Check credentials and bind the account to a session identity.

    Returns (account, session_identity) or None on bad credentials.
    """
    account = authenticate(store, username, password)
    if account is None:
        return None

    identity = session_identity or generate_session_identity()
    identity_hash = hash_session_identity(identity)

    holder = store.find_one("users", session_identity_hash=identity_hash)
    if holder is not None and holder.id != account.id:
        store.update("users", holder.id, {"session_identity_hash": None})

    bound = store.update("users", account.id, {"session_identity_hash": identity_hash})
    if bound is None:
        # Deleted between credential check and binding
        return None
    return bound, identity


def logout(store: DocumentStore, session_identity: str) -> bool:
    """Clear the binding for this identity. False if nothing was bound."""
    account = account_for_session(store, session_identity)
    if account is None:
        return False
    store.update("users", account.id, {"session_identity_hash": None})
    return True


def account_for_session(store: DocumentStore, session_identity: str | None) -> AccountRecord | None:
    if not session_identity:
        return None
    return store.find_one("users", session_identity_hash=hash_session_identity(session_identity))
