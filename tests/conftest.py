"""Shared pytest fixtures for simple_ledger tests."""

import pytest

from simple_ledger import create_app
from simple_ledger.accounting_db import db
from simple_ledger.models import Profile, User


class FakeAuthClient:
    """Stands in for the identity provider's HTTP endpoints."""

    def __init__(self, userinfo=None, phone_payload=None, error=None):
        self.userinfo = userinfo or {"sub": "google-123", "email": "owner@example.com", "name": "Owner"}
        self.phone_payload = phone_payload or {"user_phone_number": "+919876543210"}
        self.error = error
        self.calls = []

    def authorization_url(self, redirect_uri, state):
        return f"https://accounts.example.com/authorize?state={state}"

    def exchange_code(self, code, redirect_uri):
        self.calls.append(("exchange_code", code))
        if self.error:
            raise self.error
        return self.userinfo

    def fetch_phone_payload(self, user_json_url):
        self.calls.append(("fetch_phone_payload", user_json_url))
        if self.error:
            raise self.error
        return self.phone_payload


@pytest.fixture
def app(tmp_path):
    """Create an app on a temporary SQLite database."""
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'ledger.db'}",
    })
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def ctx(app):
    """App context for calling services directly (not mixed with the client)."""
    with app.app_context():
        yield


@pytest.fixture
def fake_auth(app):
    client = FakeAuthClient()
    app.extensions["auth_client"] = client
    return client


def _create_user(app, name, company_name=None, phone=None):
    with app.app_context():
        user = User(name=name, email=f"{name}@example.com", phone=phone)
        db.session.add(user)
        db.session.flush()
        if company_name:
            db.session.add(Profile(id=user.id, company_name=company_name))
        db.session.commit()
        return user.id


@pytest.fixture
def user_id(app):
    """A user who has finished onboarding."""
    return _create_user(app, "alice", company_name="Acme Threads")


@pytest.fixture
def other_user_id(app):
    return _create_user(app, "bob", company_name="Bob Traders")


@pytest.fixture
def new_user_id(app):
    """A user without a profile yet."""
    return _create_user(app, "carol")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(client):
    """Log the test client in as the given user id."""
    def _login(uid):
        with client.session_transaction() as sess:
            sess["_user_id"] = uid
            sess["_fresh"] = True
        return client
    return _login


@pytest.fixture
def logged_in_client(login_as, user_id):
    """Test client logged in as the onboarded user."""
    return login_as(user_id)
