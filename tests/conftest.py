"""
Shared fixtures.

Each test gets a fresh app on an in-memory SQLite database. The app context
stays pushed for the whole test, so models can be created and inspected
directly alongside requests made through the test client.
"""

from datetime import date
from decimal import Decimal

import pytest

from app import create_app
from auth import create_session
from config import TestConfig
from extensions import db as _db
from models import Transaction, User


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(email="user@example.com", role="USER", name="Test User"):
        user = User(email=email, role=role, name=name)
        _db.session.add(user)
        _db.session.commit()
        return user
    return _make_user


@pytest.fixture
def make_transaction(app):
    def _make_transaction(user, concept="Salary", amount="1000", tx_type="INCOME", on=date(2024, 1, 15)):
        transaction = Transaction(
            concept=concept,
            amount=Decimal(amount),
            type=tx_type,
            date=on,
            user_id=user.id,
        )
        _db.session.add(transaction)
        _db.session.commit()
        return transaction
    return _make_transaction


@pytest.fixture
def login(app, client):
    """Create a session row for `user` and put its token in the client's cookie jar."""
    def _login(user):
        user_session = create_session(user)
        client.set_cookie(app.config["AUTH_COOKIE_NAME"], user_session.session_token)
        return user_session
    return _login
