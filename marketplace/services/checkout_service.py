# marketplace/services/checkout_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from marketplace.domain import cart as aggregator
from marketplace.domain.checkout import (
    CheckoutState,
    CheckoutStateMachine,
    CheckoutStep,
)
from marketplace.domain.errors import (
    CheckoutBusyError,
    EmptyCartError,
    NotFoundError,
    PaymentGatewayError,
    PaymentVerificationError,
)
from marketplace.domain.pricing import compute_totals, money, tax_amount
from marketplace.domain.schemas import (
    AddressStepIn,
    DeliveryStepIn,
    PaymentConfirmationIn,
    PaymentStepIn,
)
from marketplace.repos.checkout_repo import CheckoutRepo
from marketplace.services.address_service import AddressService
from marketplace.services.cart_service import CartService
from marketplace.services.delivery_service import DeliveryMethodService
from marketplace.services.lock_service import LockService
from marketplace.services.order_service import OrderService
from marketplace.services.payment_gateway import PaymentGatewayClient, to_minor_units
from marketplace.utils.settings import CURRENCY, TAX_RATE
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutService:
    """
    Application service for the checkout flow.

    The CheckoutState of an attempt lives in the CheckoutRepo (redis) between
    requests. Every step goes through CheckoutStateMachine; this class only
    loads the reference data a step needs, persists the state and talks to the
    payment gateway and the busy lock.
    """

    def __init__(
        self,
        db: Session,
        checkout_repo: CheckoutRepo,
        lock_service: LockService,
        gateway: PaymentGatewayClient,
        order_service: OrderService | None = None,
    ):
        self.repo = checkout_repo
        self.lock_service = lock_service
        self.gateway = gateway
        self.carts = CartService(db)
        self.addresses = AddressService(db)
        self.delivery = DeliveryMethodService(db)
        self.orders = order_service or OrderService(db, gateway=gateway)

    # =====================================================
    # QUERY
    # =====================================================
    def _load(self, checkout_id: str, buyer_id: str) -> CheckoutState:
        state = self.repo.get(checkout_id)
        if not state:
            raise NotFoundError("Checkout not found or expired")
        if state.buyer_id != buyer_id:
            raise PermissionError("No access to this checkout")
        return state

    def totals(self, state: CheckoutState) -> Dict[str, Any]:
        lines = self.carts.lines(state.buyer_id)
        subtotal = aggregator.subtotal(lines)
        out = {
            "subtotal": money(subtotal),
            "item_count": aggregator.item_count(lines),
            "shipping_cost": None,
            "tax_amount": tax_amount(subtotal, TAX_RATE),
            "total": None,
        }
        #shipping (and so the total) is known once a delivery method is chosen
        if state.delivery_method is not None:
            out.update(compute_totals(subtotal, state.delivery_method, TAX_RATE).as_dict())
        return out

    def view(self, state: CheckoutState) -> Dict[str, Any]:
        data = state.model_dump(exclude={"gateway_order_id", "created_at"})
        data["totals"] = self.totals(state)
        return data

    def get(self, checkout_id: str, buyer_id: str) -> Dict[str, Any]:
        return self.view(self._load(checkout_id, buyer_id))

    # =====================================================
    # COMMANDS
    # =====================================================
    def start(self, buyer_id: str) -> Dict[str, Any]:
        """Use Case: begin checkout. Only a non-empty cart may enter."""
        if not self.carts.lines(buyer_id):
            raise EmptyCartError("Your cart is empty")

        state = self.repo.save(CheckoutState(buyer_id=buyer_id))
        logger.info(f"Checkout {state.id} started for buyer {buyer_id}")
        return self.view(state)

    def submit_address(self, checkout_id: str, buyer_id: str, payload: AddressStepIn) -> Dict[str, Any]:
        state = self._load(checkout_id, buyer_id)
        machine = CheckoutStateMachine(state)

        shipping = None
        if payload.shipping_address_id:
            shipping = self.addresses.get_snapshot(buyer_id, payload.shipping_address_id)

        billing = None
        if not payload.same_as_shipping and payload.billing_address_id:
            billing = self.addresses.get_snapshot(buyer_id, payload.billing_address_id)

        machine.complete_address(shipping, billing)
        self.repo.save(state)
        logger.info(f"Checkout {checkout_id}: address step done")
        return self.view(state)

    def submit_delivery(self, checkout_id: str, buyer_id: str, payload: DeliveryStepIn) -> Dict[str, Any]:
        state = self._load(checkout_id, buyer_id)
        machine = CheckoutStateMachine(state)

        method = None
        if payload.delivery_method_id:
            method = self.delivery.get_snapshot(payload.delivery_method_id)

        machine.complete_delivery(method, payload.special_instructions)
        self.repo.save(state)
        logger.info(f"Checkout {checkout_id}: delivery {state.delivery_method.name} chosen")
        return self.view(state)

    def submit_payment(self, checkout_id: str, buyer_id: str, payload: PaymentStepIn) -> Dict[str, Any]:
        state = self._load(checkout_id, buyer_id)
        machine = CheckoutStateMachine(state)

        machine.complete_payment(payload.payment, self.gateway.load_checkout_script)
        self.repo.save(state)
        logger.info(f"Checkout {checkout_id}: payment method {state.payment_method}")
        return self.view(state)

    def back(self, checkout_id: str, buyer_id: str) -> Dict[str, Any] | None:
        """Step back. Returns None when the buyer left checkout from the Address step."""
        state = self._load(checkout_id, buyer_id)
        step = CheckoutStateMachine(state).back()

        if step is None:
            self.repo.delete(checkout_id)
            logger.info(f"Checkout {checkout_id}: left to cart")
            return None

        self.repo.save(state)
        return self.view(state)

    def abandon(self, checkout_id: str, buyer_id: str):
        state = self._load(checkout_id, buyer_id)
        if state.busy:
            raise CheckoutBusyError("Order placement is in progress for this checkout")
        self.repo.delete(checkout_id)

    # =====================================================
    # ORDER PLACEMENT
    # =====================================================
    def place_order(self, checkout_id: str, buyer_id: str, accept_terms: bool) -> Dict[str, Any]:
        """
        Use Case: Place Order click on the Review step.

        Takes the busy lock (a second click gets CheckoutBusyError), then opens a
        gateway order for the freshly computed total. The client opens the hosted
        widget with the returned parameters and reports back through
        confirm_payment or cancel_payment.
        """
        state = self._load(checkout_id, buyer_id)
        machine = CheckoutStateMachine(state)

        if state.busy:
            raise CheckoutBusyError("Order placement is already in progress")

        machine.accept_terms(accept_terms)
        machine.ready_to_place()

        if not self.lock_service.acquire_checkout_lock(checkout_id, token=checkout_id):
            raise CheckoutBusyError("Order placement is already in progress")

        try:
            lines = self.carts.lines(buyer_id)
            if not lines:
                raise EmptyCartError("Your cart is empty")

            totals = compute_totals(aggregator.subtotal(lines), state.delivery_method, TAX_RATE)
            gateway_order = self.gateway.create_order(
                amount=money(totals.total),
                currency=CURRENCY,
                receipt=checkout_id,
            )
        except PaymentGatewayError:
            #gateway problems send the buyer back to pick a payment method again
            self.lock_service.release_checkout_lock(checkout_id, token=checkout_id)
            machine.release(to_step=CheckoutStep.PAYMENT)
            self.repo.save(state)
            raise
        except Exception:
            self.lock_service.release_checkout_lock(checkout_id, token=checkout_id)
            raise

        machine.begin_placement(gateway_order["gateway_order_id"])
        self.repo.save(state)

        logger.info(
            f"Checkout {checkout_id}: awaiting payment for gateway order "
            f"{gateway_order['gateway_order_id']} ({totals.total} {CURRENCY})"
        )

        return {
            "checkout_id": checkout_id,
            "key_id": self.gateway.key_id,
            "gateway_order_id": gateway_order["gateway_order_id"],
            "amount": gateway_order.get("amount", to_minor_units(totals.total)),
            "currency": gateway_order.get("currency", CURRENCY),
            "order_ref": checkout_id,
        }

    def confirm_payment(
        self,
        checkout_id: str,
        buyer_id: str,
        confirmation: PaymentConfirmationIn,
    ) -> Dict[str, Any]:
        """
        Use Case: the widget reported a successful payment.
        Verified -> order written, checkout discarded, lock released.
        Not verified -> no order, lock released, buyer stays on Review.
        """
        state = self._load(checkout_id, buyer_id)

        if not state.busy:
            raise CheckoutBusyError("No payment is awaited for this checkout")

        machine = CheckoutStateMachine(state)

        try:
            order = self.orders.place_order(buyer_id, state, confirmation)
        except PaymentVerificationError:
            machine.release()
            self.repo.save(state)
            self.lock_service.release_checkout_lock(checkout_id, token=checkout_id)
            raise
        except Exception:
            #state stays busy, retrying the same confirmation returns the order once it is written
            logger.error(f"Checkout {checkout_id}: order placement failed after payment")
            raise

        self.repo.delete(checkout_id)
        self.lock_service.release_checkout_lock(checkout_id, token=checkout_id)
        return order

    def cancel_payment(self, checkout_id: str, buyer_id: str) -> Dict[str, Any]:
        """Use Case: the buyer dismissed the hosted widget. No order, back to Payment."""
        state = self._load(checkout_id, buyer_id)

        if not state.busy:
            raise CheckoutBusyError("No payment is awaited for this checkout")

        CheckoutStateMachine(state).release(to_step=CheckoutStep.PAYMENT)
        self.repo.save(state)
        self.lock_service.release_checkout_lock(checkout_id, token=checkout_id)
        logger.info(f"Checkout {checkout_id}: payment cancelled by buyer")
        return self.view(state)
