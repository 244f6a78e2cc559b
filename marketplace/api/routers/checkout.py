# marketplace/api/routers/checkout.py
from fastapi import APIRouter, Depends, Response

from marketplace.api.deps import HANDLED, current_user_id, get_checkout_service, to_http
from marketplace.domain.schemas import (
    AddressStepIn,
    CheckoutOut,
    DeliveryStepIn,
    OrderOut,
    PaymentConfirmationIn,
    PaymentIntentOut,
    PaymentStepIn,
    PlaceOrderIn,
)
from marketplace.services.checkout_service import CheckoutService

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post("/", response_model=CheckoutOut, status_code=201)
def start_checkout(
    user_id: str = Depends(current_user_id),
    svc: CheckoutService = Depends(get_checkout_service),
):
    try:
        return svc.start(user_id)
    except HANDLED as e:
        raise to_http(e)


@router.get("/{checkout_id}", response_model=CheckoutOut)
def get_checkout(
    checkout_id: str,
    user_id: str = Depends(current_user_id),
    svc: CheckoutService = Depends(get_checkout_service),
):
    try:
        return svc.get(checkout_id, user_id)
    except HANDLED as e:
        raise to_http(e)


@router.post("/{checkout_id}/address", response_model=CheckoutOut)
def submit_address(
    checkout_id: str,
    payload: AddressStepIn,
    user_id: str = Depends(current_user_id),
    svc: CheckoutService = Depends(get_checkout_service),
):
    try:
        return svc.submit_address(checkout_id, user_id, payload)
    except HANDLED as e:
        raise to_http(e)


@router.post("/{checkout_id}/delivery", response_model=CheckoutOut)
def submit_delivery(
    checkout_id: str,
    payload: DeliveryStepIn,
    user_id: str = Depends(current_user_id),
    svc: CheckoutService = Depends(get_checkout_service),
):
    try:
        return svc.submit_delivery(checkout_id, user_id, payload)
    except HANDLED as e:
        raise to_http(e)


@router.post("/{checkout_id}/payment", response_model=CheckoutOut)
def submit_payment(
    checkout_id: str,
    payload: PaymentStepIn,
    user_id: str = Depends(current_user_id),
    svc: CheckoutService = Depends(get_checkout_service),
):
    try:
        return svc.submit_payment(checkout_id, user_id, payload)
    except HANDLED as e:
        raise to_http(e)


@router.post("/{checkout_id}/back", response_model=CheckoutOut)
def step_back(
    checkout_id: str,
    user_id: str = Depends(current_user_id),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """Back from Address leaves checkout: 204, the client returns to the cart."""
    try:
        state = svc.back(checkout_id, user_id)
    except HANDLED as e:
        raise to_http(e)

    if state is None:
        return Response(status_code=204)
    return state


@router.delete("/{checkout_id}", status_code=204)
def abandon_checkout(
    checkout_id: str,
    user_id: str = Depends(current_user_id),
    svc: CheckoutService = Depends(get_checkout_service),
):
    try:
        svc.abandon(checkout_id, user_id)
    except HANDLED as e:
        raise to_http(e)


@router.post("/{checkout_id}/place-order", response_model=PaymentIntentOut)
def place_order(
    checkout_id: str,
    payload: PlaceOrderIn,
    user_id: str = Depends(current_user_id),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """
    Starts payment for the order. The response carries what the hosted widget
    is opened with; the widget outcome comes back via /payment/confirm or /payment/cancel.
    """
    try:
        return svc.place_order(checkout_id, user_id, payload.accept_terms)
    except HANDLED as e:
        raise to_http(e)


@router.post("/{checkout_id}/payment/confirm", response_model=OrderOut, status_code=201)
def confirm_payment(
    checkout_id: str,
    payload: PaymentConfirmationIn,
    user_id: str = Depends(current_user_id),
    svc: CheckoutService = Depends(get_checkout_service),
):
    try:
        return svc.confirm_payment(checkout_id, user_id, payload)
    except HANDLED as e:
        raise to_http(e)


@router.post("/{checkout_id}/payment/cancel", response_model=CheckoutOut)
def cancel_payment(
    checkout_id: str,
    user_id: str = Depends(current_user_id),
    svc: CheckoutService = Depends(get_checkout_service),
):
    try:
        return svc.cancel_payment(checkout_id, user_id)
    except HANDLED as e:
        raise to_http(e)
