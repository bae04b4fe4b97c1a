"""Shared fixtures: in-memory SQLite, demo catalog, fake lock and notifier."""
import os

# settings are read at import time, set them before any storefront import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CATALOG_BACKEND"] = "memory"
os.environ["CHECKOUT_LOCK_ENABLED"] = "false"
os.environ["NOTIFICATIONS_ENABLED"] = "false"
os.environ.setdefault("CART_CONFLICT_RETRIES", "3")

import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api import create_app
from storefront.api.deps import get_lock_service, get_notification_service
from storefront.data.database import Base, get_db, make_engine
import storefront.data.models  # noqa: F401
from storefront.domain.schemas import Product
from storefront.services.cart_service import CartService
from storefront.services.catalog import InMemoryCatalog, get_catalog
from storefront.services.identity_service import IdentitySyncService
from storefront.services.order_service import OrderService


class FakeLockService:
    """Same contract as LockService, kept in a dict."""

    def __init__(self):
        self.held = {}
        self.released = []

    def acquire_checkout_lock(self, subject_id, ttl=30):
        if subject_id in self.held:
            return None
        token = uuid.uuid4().hex
        self.held[subject_id] = token
        return token

    def release_checkout_lock(self, subject_id, token):
        self.released.append(subject_id)
        if self.held.get(subject_id) == token:
            del self.held[subject_id]
            return True
        return False


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send_order_confirmation(self, subject_id, order_id):
        self.sent.append((subject_id, order_id))
        return True


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def file_engine(tmp_path):
    """File-backed SQLite, so two sessions hold separate connections."""
    eng = make_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def open_session(file_engine):
    sessions = []

    def _open():
        session = sessionmaker(bind=file_engine, autoflush=False)()
        sessions.append(session)
        return session

    yield _open
    for session in sessions:
        session.close()


@pytest.fixture()
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def catalog():
    return InMemoryCatalog(
        [
            Product(id=1, name="Classic Tee", price=Decimal("10.00")),
            Product(id=2, name="Denim Jeans", price=Decimal("5.00")),
            Product(id=3, name="Hoodie Sweatshirt", price=Decimal("45.00")),
        ]
    )


@pytest.fixture()
def lock_service():
    return FakeLockService()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def identity(db):
    return IdentitySyncService(db)


@pytest.fixture()
def carts(db, catalog):
    return CartService(db=db, catalog=catalog)


@pytest.fixture()
def orders(db, lock_service, notifier):
    return OrderService(db, lock_service=lock_service, notification_service=notifier)


@pytest.fixture()
def profile(identity):
    return identity.sync_profile(
        {"sub": "user-1", "email": "ada@example.com", "name": "Ada Lovelace", "email_verified": "true"}
    )


@pytest.fixture()
def client(db, catalog, notifier):
    app = create_app()

    def _db():
        yield db

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_lock_service] = lambda: None
    app.dependency_overrides[get_notification_service] = lambda: notifier

    with TestClient(app) as c:
        yield c
