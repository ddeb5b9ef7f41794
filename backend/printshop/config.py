# backend/printshop/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/printshop.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///printshop.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # bcrypt cost factor; tests drop this to keep hashing fast
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Seed an owner account on first login when the users collection is empty
    SEED_DEFAULT_OWNER = _env_flag("SEED_DEFAULT_OWNER", True)
    DEFAULT_OWNER_USERNAME = os.environ.get("DEFAULT_OWNER_USERNAME", "owner")
    DEFAULT_OWNER_PASSWORD = os.environ.get("DEFAULT_OWNER_PASSWORD", "printshop123")

    ORDER_ID_MAX_ATTEMPTS = int(os.environ.get("ORDER_ID_MAX_ATTEMPTS", "5"))
    DEFAULT_PAYMENT_METHOD = "Cash"
