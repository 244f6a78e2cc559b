"""Pytest fixtures for marketplace tests."""

import os

# must be set before anything from marketplace is imported (settings read env at import)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "1"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["PAYMENT_KEY_ID"] = "rzp_test_key"
os.environ["PAYMENT_KEY_SECRET"] = "test_secret"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from marketplace.api.deps import get_payment_gateway, get_redis
from marketplace.data.database import Base, SessionLocal, engine, init_db
from marketplace.data.models.address import AddressModel
from marketplace.data.models.delivery_method import DeliveryMethodModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.user import UserModel
from marketplace.domain.errors import PaymentGatewayError
from marketplace.main import app
from marketplace.repos.checkout_repo import CheckoutRepo
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.lock_service import LockService
from marketplace.services.payment_gateway import (
    PaymentGatewayClient,
    compute_signature,
    to_minor_units,
)


class FakeRedis:
    """In-memory stand-in for the few redis commands the services use. TTLs are ignored."""

    def __init__(self):
        self.store = {}

    def get(self, name):
        return self.store.get(name)

    def set(self, name, value, ex=None, nx=False):
        if nx and name in self.store:
            return None
        self.store[name] = value
        return True

    def delete(self, *names):
        removed = 0
        for name in names:
            if self.store.pop(name, None) is not None:
                removed += 1
        return removed

    def eval(self, script, numkeys, *keys_and_args):
        #only the compare-and-delete release script is ever evaluated
        key, token = keys_and_args[0], keys_and_args[numkeys]
        if self.store.get(key) == token:
            del self.store[key]
            return 1
        return 0


class FakeGateway(PaymentGatewayClient):
    """Gateway with canned order creation and widget loading; signatures are real HMACs."""

    def __init__(self):
        super().__init__(
            base_url="http://gateway.test",
            key_id="rzp_test_key",
            key_secret="test_secret",
            script_url="http://gateway.test/checkout.js",
        )
        self.widget_available = True
        self.fail_create = False
        self.created = []

    def create_order(self, amount, currency, receipt):
        if self.fail_create:
            raise PaymentGatewayError("Failed to create payment order")
        gateway_order_id = f"order_{len(self.created) + 1}"
        self.created.append({"amount": amount, "receipt": receipt})
        return {
            "gateway_order_id": gateway_order_id,
            "amount": to_minor_units(amount),
            "currency": currency,
            "receipt": receipt,
        }

    def load_checkout_script(self):
        return self.widget_available

    def sign(self, gateway_order_id, payment_id):
        return compute_signature(self.key_secret, gateway_order_id, payment_id)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def db():
    """Fresh in-memory schema per test."""
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db, fake_redis, gateway):
    app.dependency_overrides[get_redis] = lambda: fake_redis
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def buyer(db):
    user = UserModel(id="buyer-1", name="Asha Traders", email="asha@example.com", role="buyer")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def seller(db):
    user = UserModel(id="seller-1", name="Steel Works", email="sales@steel.example", role="seller")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def make_product(db, seller):
    def _make(price, title="Steel bolts", stock=1000):
        product = ProductModel(
            seller_id=seller.id,
            title=title,
            category="hardware",
            price=Decimal(str(price)),
            stock_quantity=stock,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def address(db, buyer):
    addr = AddressModel(
        user_id=buyer.id,
        full_name="Asha Rao",
        phone="+91 98765 43210",
        address_line_1="12 Industrial Estate",
        city="Pune",
        state="Maharashtra",
        postal_code="411001",
        country="India",
        is_default=True,
    )
    db.add(addr)
    db.commit()
    return addr


@pytest.fixture
def delivery_methods(db):
    methods = [
        DeliveryMethodModel(name="Standard Delivery", base_cost=Decimal("50.00"), estimated_days=5),
        DeliveryMethodModel(name="Express Delivery", base_cost=Decimal("150.00"), estimated_days=2),
        DeliveryMethodModel(name="Discontinued", base_cost=Decimal("20.00"), estimated_days=9, is_active=False),
    ]
    db.add_all(methods)
    db.commit()
    return {"standard": methods[0], "express": methods[1], "inactive": methods[2]}


@pytest.fixture
def checkout_service(db, fake_redis, gateway):
    return CheckoutService(
        db=db,
        checkout_repo=CheckoutRepo(fake_redis),
        lock_service=LockService(client=fake_redis),
        gateway=gateway,
    )
