import os

# Point the application at a throwaway database before it is imported
os.environ["DATABASE_URL"] = "sqlite://"

import itertools
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db, use_immediate_transactions
from exceptions import GatewayError
from main import app as fastapi_app
from models.medicine import Medicine
from models.users import User, ROLE_ADMIN, ROLE_CUSTOMER, ROLE_PHARMACY
from schemas.payment import PaymentIntent
from utils.razorpay_client import get_payment_gateway
from utils.signature import compute_payment_signature
from utils.tokenJWT import token_for_user


# Mark tests from their folder
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class FakeGateway:
    """Stands in for Razorpay: hands out sequential order ids or fails on demand."""

    def __init__(self):
        self._ids = itertools.count(1)
        self.calls = []
        self.error = None

    async def create_intent(self, amount_minor, currency, metadata=None):
        self.calls.append({"amount": amount_minor, "currency": currency, "metadata": metadata})
        if self.error is not None:
            raise self.error
        return PaymentIntent(intent_id=f"order_test{next(self._ids)}", amount=amount_minor, currency=currency)

    def fail_with(self, error=None):
        self.error = error or GatewayError("gateway down", status_code=503)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def file_session_factory(tmp_path):
    # Real file database so that threads get their own connections
    eng = use_immediate_transactions(create_engine(
        f"sqlite:///{tmp_path / 'store.db'}",
        connect_args={"check_same_thread": False},
    ))
    Base.metadata.create_all(bind=eng)
    yield sessionmaker(bind=eng, autocommit=False, autoflush=False)
    eng.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(session_factory, gateway) -> Generator[TestClient, None, None]:
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = _get_test_db
    fastapi_app.dependency_overrides[get_payment_gateway] = lambda: gateway
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


def _user(db, email, name, role, verified=False):
    user = User(email=email, name=name, role=role, verified=verified)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def pharmacy(db):
    return _user(db, "store@example.com", "City Pharmacy", ROLE_PHARMACY, verified=True)


@pytest.fixture
def other_pharmacy(db):
    return _user(db, "other-store@example.com", "Other Pharmacy", ROLE_PHARMACY, verified=True)


@pytest.fixture
def customer(db):
    return _user(db, "alice@example.com", "Alice", ROLE_CUSTOMER)


@pytest.fixture
def other_customer(db):
    return _user(db, "bob@example.com", "Bob", ROLE_CUSTOMER)


@pytest.fixture
def admin(db):
    return _user(db, "admin@example.com", "Admin", ROLE_ADMIN, verified=True)


@pytest.fixture
def make_medicine(db, pharmacy):
    def _make(name="Paracetamol", price="50.00", stock=5, owner=None):
        med = Medicine(
            name=name, price=Decimal(price), stock_quantity=stock,
            pharmacy_id=(owner or pharmacy).id, image=f"/img/{name.lower()}.png",
        )
        db.add(med)
        db.commit()
        db.refresh(med)
        return med
    return _make


@pytest.fixture
def auth():
    def _headers(user):
        return {"Authorization": f"Bearer {token_for_user(user)}"}
    return _headers


@pytest.fixture
def sign():
    return compute_payment_signature


@pytest.fixture
def address():
    return {
        "fullName": "Alice Example",
        "addressLine1": "12 MG Road",
        "city": "Pune",
        "state": "Maharashtra",
        "zipCode": "411001",
        "phone": "+91 98765 43210",
    }
