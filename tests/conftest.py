import os

os.environ.update(
    {
        "APP_ENV": "test",
        "LOG_LEVEL": "WARNING",
        "LOG_FILE": "",
        "DATABASE_URL": "sqlite://",
        "SUPABASE_URL": "https://identity.test",
        "SUPABASE_ANON_KEY": "anon-test-key",
        "CLOUDINARY_CLOUD_NAME": "sonie-test",
        "CLOUDINARY_API_KEY": "123456789",
        "CLOUDINARY_API_SECRET": "cloud-secret",
        "CLOUDINARY_FOLDER": "sonie-atelier/bags",
        "SESSION_SECRET": "test-session-secret",
        "SITE_URL": "https://sonie.test",
    }
)

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.core.auth import IdentityGateway, get_identity_gateway
from app.core.db import Base, SessionLocal, engine
from app.core.session import ADMIN_SESSION_COOKIE, encode_session
from app.modules.catalog.models import Bag
from app.schemas.session import AdminSession, AdminUser


class FakeProviderError(Exception):
    def __init__(self, message):
        super().__init__(message)
        self.message = message


class FakeIdentityProvider:
    """In-memory stand-in for the hosted identity provider's auth API."""

    def __init__(self):
        self.accounts = {
            "ada@sonie.test": {"id": "owner-a", "password": "correct-horse", "token": "token-a"},
            "bea@sonie.test": {"id": "owner-b", "password": "battery-staple", "token": "token-b"},
        }
        self.require_email_verification = False
        self.oauth_url = "https://identity.test/auth/v1/authorize?provider=google"
        self.oauth_error = None
        self.codes = {"good-code": "ada@sonie.test"}
        self.calls = []

    def client(self, access_token=None):
        return SimpleNamespace(auth=_FakeAuth(self, access_token))

    def _auth_response(self, email):
        account = self.accounts[email]
        return SimpleNamespace(
            session=SimpleNamespace(
                access_token=account["token"],
                refresh_token=f"refresh-{account['id']}",
                expires_at=1_900_000_000,
            ),
            user=SimpleNamespace(id=account["id"], email=email),
        )


class _FakeAuth:
    def __init__(self, provider, access_token):
        self.provider = provider
        self.access_token = access_token

    def sign_in_with_password(self, credentials):
        self.provider.calls.append("sign_in_with_password")
        account = self.provider.accounts.get(credentials["email"])
        if not account or account["password"] != credentials["password"]:
            raise FakeProviderError("Invalid login credentials")
        return self.provider._auth_response(credentials["email"])

    def sign_up(self, credentials):
        self.provider.calls.append("sign_up")
        email = credentials["email"]
        if email in self.provider.accounts:
            raise FakeProviderError("User already registered")
        self.provider.accounts[email] = {
            "id": f"owner-{len(self.provider.accounts)}",
            "password": credentials["password"],
            "token": f"token-{len(self.provider.accounts)}",
        }
        if self.provider.require_email_verification:
            return SimpleNamespace(session=None, user=SimpleNamespace(id="pending", email=email))
        return self.provider._auth_response(email)

    def sign_in_with_oauth(self, credentials):
        self.provider.calls.append(("sign_in_with_oauth", credentials))
        if self.provider.oauth_error:
            raise FakeProviderError(self.provider.oauth_error)
        return SimpleNamespace(provider=credentials["provider"], url=self.provider.oauth_url)

    def exchange_code_for_session(self, params):
        self.provider.calls.append("exchange_code_for_session")
        email = self.provider.codes.get(params["auth_code"])
        if not email:
            raise FakeProviderError("invalid flow state, no valid flow state found")
        return self.provider._auth_response(email)

    def get_user(self, jwt=None):
        for email, account in self.provider.accounts.items():
            if account["token"] == jwt:
                return SimpleNamespace(user=SimpleNamespace(id=account["id"], email=email))
        raise FakeProviderError("invalid JWT: token is expired")


OWNER_A = AdminUser(id="owner-a", email="ada@sonie.test")
OWNER_B = AdminUser(id="owner-b", email="bea@sonie.test")


def as_user(user):
    return lambda: user


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def provider():
    return FakeIdentityProvider()


@pytest.fixture
def identity(provider):
    return IdentityGateway(client_factory=provider.client, site_url="https://sonie.test")


@pytest.fixture
def client(db, identity):
    app.dependency_overrides[get_identity_gateway] = lambda: identity
    with TestClient(app, base_url="https://testserver") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    def _login(token="token-a", email="ada@sonie.test"):
        cookie = encode_session(AdminSession(access_token=token, refresh_token="r", expires_at=1_900_000_000, email=email))
        client.cookies.set(ADMIN_SESSION_COOKIE, cookie)
        return client

    return _login


@pytest.fixture
def make_bag(db):
    def _make_bag(user_id="owner-a", name="Atelier Tote", available=True, images=None, **fields):
        bag = Bag(
            user_id=user_id,
            name=name,
            available=available,
            images=images if images is not None else [
                {"url": "https://cdn.test/tote-front.jpg", "publicId": "tote-front", "isDefault": True},
                {"url": "https://cdn.test/tote-side.jpg", "publicId": "tote-side", "isDefault": False},
            ],
            **fields,
        )
        db.add(bag)
        db.commit()
        db.refresh(bag)
        return bag

    return _make_bag
