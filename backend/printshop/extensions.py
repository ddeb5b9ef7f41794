# Overview: Flask extension instances for database and migrations.

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()


def get_store():
    """Document store bound to the running app (see create_app)."""
    return current_app.extensions["document_store"]
