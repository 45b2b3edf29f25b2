from datetime import datetime

import pytest

from expensetracker import create_app
from expensetracker.config import TestConfig
from expensetracker.extensions import db
from expensetracker.models import Expense, User


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(user_id="user-1", email=None):
        user = User(id=user_id, email=email)
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def add_expense(app):
    """Insert a row directly, bypassing validation, to control every column."""
    def _add(user_id, title="Lunch", amount=100, category="Food", date="2025-01-01", description=None):
        if isinstance(date, str):
            date = datetime.fromisoformat(date)
        exp = Expense(user_id=user_id, title=title, amount=amount, category=category,
                      date=date, description=description)
        db.session.add(exp)
        db.session.commit()
        return exp
    return _add


def _sign_in(client, user_id):
    with client.session_transaction() as sess:
        sess["_user_id"] = user_id
        sess["_fresh"] = True


@pytest.fixture
def auth_client(client, make_user):
    make_user("user-1", "one@example.com")
    _sign_in(client, "user-1")
    return client


@pytest.fixture
def sign_in():
    return _sign_in
