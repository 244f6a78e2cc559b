"""Order placement through the checkout service: payment verification, busy flag, atomic write."""

from decimal import Decimal

import pytest
import redis
from sqlalchemy.exc import SQLAlchemyError

from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain.checkout import CheckoutStep
from marketplace.domain.errors import (
    CheckoutBusyError,
    EmptyCartError,
    OrderPersistenceError,
    PaymentGatewayError,
    PaymentVerificationError,
    ValidationError,
)
from marketplace.domain.schemas import (
    AddressStepIn,
    DeliveryStepIn,
    PaymentConfirmationIn,
    PaymentStepIn,
)
from marketplace.services import notification_service
from marketplace.services.cart_service import CartService


def order_count(db):
    return db.query(OrderModel).count()


@pytest.fixture
def filled_cart(db, buyer, make_product):
    bolts = make_product("10.00")
    nuts = make_product("5.00", title="Nuts")
    carts = CartService(db)
    carts.add_product(buyer.id, bolts.id, 2)
    carts.add_product(buyer.id, nuts.id, 3)
    return {"bolts": bolts, "nuts": nuts}


@pytest.fixture
def at_review(checkout_service, buyer, address, delivery_methods, filled_cart):
    view = checkout_service.start(buyer.id)
    checkout_id = view["id"]
    checkout_service.submit_address(checkout_id, buyer.id, AddressStepIn(shipping_address_id=address.id))
    checkout_service.submit_delivery(
        checkout_id,
        buyer.id,
        DeliveryStepIn(delivery_method_id=delivery_methods["standard"].id),
    )
    checkout_service.submit_payment(
        checkout_id,
        buyer.id,
        PaymentStepIn.model_validate({"payment": {"method": "upi", "upi_id": "asha@okbank"}}),
    )
    return checkout_id


def confirmation(gateway, gateway_order_id, payment_id="pay_001", signature=None):
    return PaymentConfirmationIn(
        gateway_order_id=gateway_order_id,
        payment_id=payment_id,
        signature=signature or gateway.sign(gateway_order_id, payment_id),
    )


class TestPlaceOrder:
    def test_verified_payment_creates_order(self, db, checkout_service, gateway, buyer, at_review, filled_cart):
        intent = checkout_service.place_order(at_review, buyer.id, accept_terms=True)

        # 35 + 50 shipping + 6.30 tax
        assert intent["amount"] == 9130
        assert intent["currency"] == "INR"
        assert intent["order_ref"] == at_review

        order = checkout_service.confirm_payment(
            at_review, buyer.id, confirmation(gateway, intent["gateway_order_id"])
        )

        assert order["status"] == "paid"
        assert order["subtotal"] == Decimal("35.00")
        assert order["shipping_cost"] == Decimal("50.00")
        assert order["tax_amount"] == Decimal("6.30")
        assert order["total_amount"] == Decimal("91.30")
        assert order["order_number"].startswith("ORD-")
        assert order["shipping_address"]["city"] == "Pune"

        prices = {i["product_id"]: i["unit_price"] for i in order["items"]}
        assert prices == {filled_cart["bolts"].id: Decimal("10.00"), filled_cart["nuts"].id: Decimal("5.00")}

        assert db.query(CartItemModel).filter_by(buyer_id=buyer.id).count() == 0
        assert checkout_service.repo.get(at_review) is None
        assert not checkout_service.lock_service.is_locked(at_review)

    def test_terms_must_be_accepted(self, db, checkout_service, gateway, buyer, at_review):
        with pytest.raises(ValidationError) as exc:
            checkout_service.place_order(at_review, buyer.id, accept_terms=False)

        assert "terms" in str(exc.value)
        assert gateway.created == []
        assert not checkout_service.lock_service.is_locked(at_review)

    def test_unverified_signature_creates_no_order(self, db, checkout_service, gateway, buyer, at_review):
        intent = checkout_service.place_order(at_review, buyer.id, accept_terms=True)
        before = order_count(db)

        with pytest.raises(PaymentVerificationError) as exc:
            checkout_service.confirm_payment(
                at_review,
                buyer.id,
                confirmation(gateway, intent["gateway_order_id"], signature="forged"),
            )

        assert "contact support" in str(exc.value)
        assert order_count(db) == before
        assert db.query(OrderItemModel).count() == 0
        assert db.query(CartItemModel).filter_by(buyer_id=buyer.id).count() == 2

        state = checkout_service.repo.get(at_review)
        assert state.busy is False
        assert state.current_step == CheckoutStep.REVIEW
        assert not checkout_service.lock_service.is_locked(at_review)

    def test_confirmation_for_other_gateway_order_rejected(self, db, checkout_service, gateway, buyer, at_review):
        checkout_service.place_order(at_review, buyer.id, accept_terms=True)

        with pytest.raises(PaymentVerificationError):
            checkout_service.confirm_payment(at_review, buyer.id, confirmation(gateway, "order_other"))

        assert order_count(db) == 0

    def test_double_click_places_one_order(self, db, checkout_service, gateway, buyer, at_review):
        intent = checkout_service.place_order(at_review, buyer.id, accept_terms=True)

        with pytest.raises(CheckoutBusyError):
            checkout_service.place_order(at_review, buyer.id, accept_terms=True)

        assert len(gateway.created) == 1

        checkout_service.confirm_payment(at_review, buyer.id, confirmation(gateway, intent["gateway_order_id"]))
        assert order_count(db) == 1

    def test_lock_held_elsewhere_blocks_placement(self, db, checkout_service, gateway, buyer, at_review):
        #another worker already holds the busy lock for this checkout
        checkout_service.lock_service.acquire_checkout_lock(at_review, token="other-worker")

        with pytest.raises(CheckoutBusyError):
            checkout_service.place_order(at_review, buyer.id, accept_terms=True)

        assert gateway.created == []
        assert checkout_service.repo.get(at_review).busy is False

    def test_gateway_failure_returns_to_payment(self, db, checkout_service, gateway, buyer, at_review):
        gateway.fail_create = True

        with pytest.raises(PaymentGatewayError):
            checkout_service.place_order(at_review, buyer.id, accept_terms=True)

        state = checkout_service.repo.get(at_review)
        assert state.current_step == CheckoutStep.PAYMENT
        assert state.busy is False
        assert not checkout_service.lock_service.is_locked(at_review)
        assert order_count(db) == 0

    def test_cancelled_widget_releases_busy_flag(self, db, checkout_service, buyer, at_review):
        checkout_service.place_order(at_review, buyer.id, accept_terms=True)

        view = checkout_service.cancel_payment(at_review, buyer.id)

        assert view["busy"] is False
        assert view["current_step"] == CheckoutStep.PAYMENT
        assert not checkout_service.lock_service.is_locked(at_review)
        assert order_count(db) == 0

    def test_cart_emptied_after_review(self, db, checkout_service, buyer, at_review):
        CartService(db).clear_cart(buyer.id)

        with pytest.raises(EmptyCartError):
            checkout_service.place_order(at_review, buyer.id, accept_terms=True)

        assert not checkout_service.lock_service.is_locked(at_review)


class TestRecomputedTotals:
    def test_cart_change_after_review_is_charged(self, db, checkout_service, gateway, buyer, at_review, filled_cart):
        CartService(db).add_product(buyer.id, filled_cart["bolts"].id, 98)

        intent = checkout_service.place_order(at_review, buyer.id, accept_terms=True)
        order = checkout_service.confirm_payment(at_review, buyer.id, confirmation(gateway, intent["gateway_order_id"]))

        # 100 x 10 + 3 x 5 = 1015, free standard shipping, tax 182.70
        assert order["subtotal"] == Decimal("1015.00")
        assert order["shipping_cost"] == Decimal("0.00")
        assert order["total_amount"] == Decimal("1197.70")

    def test_price_change_between_payment_and_confirmation_not_guarded(
        self, db, checkout_service, gateway, buyer, at_review, filled_cart
    ):
        #known race: live prices are read without locking, the order uses the price at write time
        intent = checkout_service.place_order(at_review, buyer.id, accept_terms=True)

        filled_cart["bolts"].price = Decimal("11.00")
        db.commit()

        order = checkout_service.confirm_payment(at_review, buyer.id, confirmation(gateway, intent["gateway_order_id"]))

        assert intent["amount"] == 9130
        assert order["total_amount"] != Decimal("91.30")
        assert order["subtotal"] == Decimal("37.00")


class TestPersistenceFailure:
    def test_rollback_leaves_nothing_behind(self, db, checkout_service, gateway, buyer, at_review, monkeypatch):
        intent = checkout_service.place_order(at_review, buyer.id, accept_terms=True)

        def broken_items(items):
            raise SQLAlchemyError("disk full")

        monkeypatch.setattr(checkout_service.orders.repo, "add_order_items", broken_items)

        with pytest.raises(OrderPersistenceError):
            checkout_service.confirm_payment(at_review, buyer.id, confirmation(gateway, intent["gateway_order_id"]))

        assert order_count(db) == 0
        assert db.query(CartItemModel).filter_by(buyer_id=buyer.id).count() == 2

        #payment already went through, the confirmation can be retried
        assert checkout_service.repo.get(at_review).busy is True

        monkeypatch.undo()
        order = checkout_service.confirm_payment(
            at_review, buyer.id, confirmation(gateway, intent["gateway_order_id"])
        )
        assert order["total_amount"] == Decimal("91.30")
        assert order_count(db) == 1


class TestFailuresAfterCommit:
    def test_unreachable_broker_does_not_fail_order(self, db, checkout_service, gateway, buyer, at_review, monkeypatch):
        class DownTask:
            def delay(self, *args):
                raise ConnectionError("broker unreachable")

        monkeypatch.setattr(notification_service, "send_order_notification_task", DownTask())
        intent = checkout_service.place_order(at_review, buyer.id, accept_terms=True)

        order = checkout_service.confirm_payment(at_review, buyer.id, confirmation(gateway, intent["gateway_order_id"]))

        assert order["status"] == "paid"
        assert order_count(db) == 1
        assert checkout_service.repo.get(at_review) is None
        assert not checkout_service.lock_service.is_locked(at_review)

    def test_retried_confirmation_returns_placed_order(self, db, checkout_service, gateway, buyer, at_review, monkeypatch):
        intent = checkout_service.place_order(at_review, buyer.id, accept_terms=True)
        payload = confirmation(gateway, intent["gateway_order_id"])

        def redis_down(checkout_id):
            raise redis.ConnectionError("redis unreachable")

        monkeypatch.setattr(checkout_service.repo, "delete", redis_down)

        with pytest.raises(redis.ConnectionError):
            checkout_service.confirm_payment(at_review, buyer.id, payload)

        assert order_count(db) == 1
        assert checkout_service.repo.get(at_review).busy is True

        monkeypatch.undo()
        retried = checkout_service.confirm_payment(at_review, buyer.id, payload)

        assert order_count(db) == 1
        assert retried["id"] == db.query(OrderModel).one().id
        assert retried["total_amount"] == Decimal("91.30")
        assert checkout_service.repo.get(at_review) is None
        assert not checkout_service.lock_service.is_locked(at_review)

    def test_retry_still_requires_valid_signature(self, db, checkout_service, gateway, buyer, at_review):
        intent = checkout_service.place_order(at_review, buyer.id, accept_terms=True)
        order = checkout_service.orders.place_order(
            buyer.id,
            checkout_service.repo.get(at_review),
            confirmation(gateway, intent["gateway_order_id"]),
        )
        assert order["status"] == "paid"

        with pytest.raises(PaymentVerificationError):
            checkout_service.orders.place_order(
                buyer.id,
                checkout_service.repo.get(at_review),
                confirmation(gateway, intent["gateway_order_id"], signature="forged"),
            )
        assert order_count(db) == 1
