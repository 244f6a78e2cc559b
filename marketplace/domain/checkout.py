# marketplace/domain/checkout.py
"""
Checkout state machine.

Address -> Delivery -> Payment -> Review, strictly linear. Each ``complete_*``
call validates its input, writes it into the state and moves one step forward.
``back`` moves one step back without clearing anything that was entered.
The machine does no I/O of its own; the payment widget loader is passed in.
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field

from marketplace.domain.errors import (
    CheckoutBusyError,
    PaymentGatewayError,
    StepOrderError,
    ValidationError,
)


class CheckoutStep(str, Enum):
    ADDRESS = "address"
    DELIVERY = "delivery"
    PAYMENT = "payment"
    REVIEW = "review"


STEPS = [CheckoutStep.ADDRESS, CheckoutStep.DELIVERY, CheckoutStep.PAYMENT, CheckoutStep.REVIEW]

MIN_PHONE_DIGITS = 10
MIN_POSTAL_CODE_LENGTH = 6


class AddressSnapshot(BaseModel):
    id: Optional[str] = None
    full_name: str
    phone: str
    address_line_1: str
    address_line_2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str = "India"


class DeliveryMethodSnapshot(BaseModel):
    id: str
    name: str
    base_cost: Decimal
    estimated_days: int
    is_active: bool = True


# =====================================================
# PAYMENT METHODS (tagged union on "method")
# =====================================================
class CardPayment(BaseModel):
    method: Literal["card"] = "card"
    card_number: str = ""
    expiry_date: str = ""
    cvv: str = ""
    cardholder_name: str = ""

    def missing(self) -> list[str]:
        fields = ("card_number", "expiry_date", "cvv", "cardholder_name")
        return [f for f in fields if not getattr(self, f).strip()]

    def summary(self) -> dict:
        #card secrets never leave this object
        digits = "".join(ch for ch in self.card_number if ch.isdigit())
        return {"last4": digits[-4:], "cardholder_name": self.cardholder_name.strip()}


class UpiPayment(BaseModel):
    method: Literal["upi"] = "upi"
    upi_id: str = ""

    def missing(self) -> list[str]:
        return [] if self.upi_id.strip() else ["upi_id"]

    def summary(self) -> dict:
        return {"upi_id": self.upi_id.strip()}


class NetBankingPayment(BaseModel):
    method: Literal["netbanking"] = "netbanking"
    bank: str = ""

    def missing(self) -> list[str]:
        return [] if self.bank.strip() else ["bank"]

    def summary(self) -> dict:
        return {"bank": self.bank.strip()}


class WalletPayment(BaseModel):
    method: Literal["wallet"] = "wallet"

    def missing(self) -> list[str]:
        return []

    def summary(self) -> dict:
        return {}


PaymentSelection = Annotated[
    Union[CardPayment, UpiPayment, NetBankingPayment, WalletPayment],
    Field(discriminator="method"),
]


# =====================================================
# STATE
# =====================================================
class CheckoutState(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    buyer_id: str
    current_step: CheckoutStep = CheckoutStep.ADDRESS

    shipping_address: Optional[AddressSnapshot] = None
    billing_address: Optional[AddressSnapshot] = None
    delivery_method: Optional[DeliveryMethodSnapshot] = None
    special_instructions: str = ""
    payment_method: Optional[str] = None
    payment_details: dict = Field(default_factory=dict)

    terms_accepted: bool = False
    busy: bool = False
    gateway_order_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def validate_address(address: AddressSnapshot) -> None:
    errors = []

    if not address.full_name.strip():
        errors.append("Full name is required")

    digits = [ch for ch in address.phone if ch.isdigit()]
    if len(digits) < MIN_PHONE_DIGITS:
        errors.append(f"Phone number must be at least {MIN_PHONE_DIGITS} digits")

    if len(address.postal_code.strip()) < MIN_POSTAL_CODE_LENGTH:
        errors.append(f"Postal code must be at least {MIN_POSTAL_CODE_LENGTH} characters")

    for field in ("address_line_1", "city", "state", "country"):
        if not getattr(address, field).strip():
            errors.append(f"{field} is required")

    if errors:
        raise ValidationError("; ".join(errors))


class CheckoutStateMachine:
    """
    Wraps one CheckoutState and enforces the step contract on it.
    The state object is mutated in place and also returned from each step.
    """

    def __init__(self, state: CheckoutState):
        self.state = state

    def _require_step(self, step: CheckoutStep):
        if self.state.busy:
            raise CheckoutBusyError("Order placement is in progress for this checkout")

        if self.state.current_step != step:
            raise StepOrderError(
                f"Cannot complete {step.value} step while checkout is at "
                f"{self.state.current_step.value} step"
            )

    def _advance(self):
        idx = STEPS.index(self.state.current_step)
        self.state.current_step = STEPS[idx + 1]

    def complete_address(
        self,
        shipping: AddressSnapshot | None,
        billing: AddressSnapshot | None = None,
    ) -> CheckoutState:
        self._require_step(CheckoutStep.ADDRESS)

        if shipping is None:
            raise ValidationError("Please select or add a shipping address")

        validate_address(shipping)
        if billing is not None:
            validate_address(billing)

        self.state.shipping_address = shipping
        #billing follows shipping unless a different address was chosen
        self.state.billing_address = billing or shipping
        self._advance()
        return self.state

    def complete_delivery(
        self,
        method: DeliveryMethodSnapshot | None,
        special_instructions: str = "",
    ) -> CheckoutState:
        self._require_step(CheckoutStep.DELIVERY)

        if method is None:
            raise ValidationError("Please select a delivery method")

        if not method.is_active:
            raise ValidationError(f"Delivery method {method.name} is not available")

        self.state.delivery_method = method
        self.state.special_instructions = special_instructions or ""
        self._advance()
        return self.state

    def complete_payment(
        self,
        selection: CardPayment | UpiPayment | NetBankingPayment | WalletPayment | None,
        widget_loader: Callable[[], bool],
    ) -> CheckoutState:
        self._require_step(CheckoutStep.PAYMENT)

        if selection is None:
            raise ValidationError("Please select a payment method")

        missing = selection.missing()
        if missing:
            raise ValidationError(
                f"Missing {selection.method} payment details: {', '.join(missing)}"
            )

        # the hosted widget has to be available before the step can finish
        if not widget_loader():
            raise PaymentGatewayError("Failed to load payment gateway")

        self.state.payment_method = selection.method
        self.state.payment_details = selection.summary()
        self._advance()
        return self.state

    def accept_terms(self, accepted: bool) -> CheckoutState:
        self._require_step(CheckoutStep.REVIEW)
        self.state.terms_accepted = bool(accepted)
        return self.state

    def back(self) -> CheckoutStep | None:
        """
        Step back one step keeping everything entered so far.
        Returns None when stepping back from Address, which leaves checkout.
        """
        if self.state.busy:
            raise CheckoutBusyError("Order placement is in progress for this checkout")

        idx = STEPS.index(self.state.current_step)
        if idx == 0:
            return None

        self.state.current_step = STEPS[idx - 1]
        self.state.terms_accepted = False
        return self.state.current_step

    def ready_to_place(self):
        self._require_step(CheckoutStep.REVIEW)

        if not self.state.terms_accepted:
            raise ValidationError("Please accept the terms and conditions to place the order")

    def begin_placement(self, gateway_order_id: str) -> CheckoutState:
        self.ready_to_place()
        self.state.busy = True
        self.state.gateway_order_id = gateway_order_id
        return self.state

    def release(self, to_step: CheckoutStep | None = None) -> CheckoutState:
        """Clear the busy flag after a failed or cancelled payment."""
        self.state.busy = False
        self.state.gateway_order_id = None
        if to_step is not None:
            self.state.current_step = to_step
            self.state.terms_accepted = False
        return self.state
