"""
Pytest fixtures for print shop backend tests.

Provides test database setup, per-role accounts, and test client.
"""

import random
from datetime import datetime
from decimal import Decimal

import pytest

from printshop import create_app
from printshop.document_store import DocumentStore
from printshop.extensions import db
from printshop.permissions import system_actor
from printshop.records import METHOD_BY_AREA, METHOD_BY_PACKAGE, METHOD_BY_UNIT
from printshop.services import auth_service, products_service


PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'SEED_DEFAULT_OWNER': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def store(db_session):
    """A document store with no subscribers left over from other tests."""
    return DocumentStore(db)


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 18, 9, 30, 15)


@pytest.fixture
def rng():
    return random.Random(1234)


# =============================================================================
# ACCOUNTS
# =============================================================================

def _account(store, username, role):
    return auth_service.create_account(store, username, PASSWORD, role, system_actor())


@pytest.fixture
def owner(store):
    return _account(store, "owner1", "owner")


@pytest.fixture
def supervisor(store):
    return _account(store, "supervisor1", "supervisor")


@pytest.fixture
def cashier(store):
    return _account(store, "cashier1", "cashier")


@pytest.fixture
def designer(store):
    return _account(store, "designer1", "designer")


def get_session_identity(client, username: str, password: str = PASSWORD) -> str:
    """Helper to log in and get the session identity."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('session_identity')
    return None


def auth_headers(identity: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {identity}'}


@pytest.fixture
def owner_headers(client, owner):
    return auth_headers(get_session_identity(client, owner.username))


@pytest.fixture
def supervisor_headers(client, supervisor):
    return auth_headers(get_session_identity(client, supervisor.username))


@pytest.fixture
def cashier_headers(client, cashier):
    return auth_headers(get_session_identity(client, cashier.username))


@pytest.fixture
def designer_headers(client, designer):
    return auth_headers(get_session_identity(client, designer.username))


# =============================================================================
# CATALOG
# =============================================================================

@pytest.fixture
def banner(store):
    """Area-priced product: 50000 per square unit."""
    return products_service.create_product(
        store,
        {"name": "Banner", "unit_price": "50000", "calculation_method": METHOD_BY_AREA},
        system_actor(),
    )


@pytest.fixture
def sticker_pack(store):
    return products_service.create_product(
        store,
        {"name": "Stiker A3", "unit_price": "15000", "calculation_method": METHOD_BY_PACKAGE},
        system_actor(),
    )


@pytest.fixture
def business_card(store):
    return products_service.create_product(
        store,
        {"name": "Kartu Nama", "unit_price": Decimal("500"), "calculation_method": METHOD_BY_UNIT},
        system_actor(),
    )
