#marketplace/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api.deps import HANDLED, current_user_id, to_http
from marketplace.data.database import get_db
from marketplace.domain.schemas import (
    ItemIn,
    QuantityIn,
    CartOut,
)
from marketplace.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db=db)


@router.get("/", response_model=CartOut)
def get_cart(
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    return svc.get_cart(user_id)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.add_product(
            buyer_id=user_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
        )
    except HANDLED as e:
        raise to_http(e)


@router.patch("/items/{product_id}", response_model=CartOut)
def set_quantity(
    product_id: str,
    payload: QuantityIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.set_quantity(user_id, product_id, payload.quantity)
    except HANDLED as e:
        raise to_http(e)


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: str,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.remove_product(user_id, product_id)
    except HANDLED as e:
        raise to_http(e)


@router.delete("/", response_model=CartOut)
def clear_cart(
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    return svc.clear_cart(user_id)
