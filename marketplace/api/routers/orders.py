# marketplace/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api.deps import HANDLED, current_user_id, to_http
from marketplace.data.database import get_db
from marketplace.domain.schemas import OrderOut
from marketplace.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


#orders are only ever created through /checkout/{id}/payment/confirm


@router.get("/", response_model=List[OrderOut])
def list_orders(
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    """
    Buyer: own orders. Seller: orders containing their products. Admin: all.
    """
    svc = get_service(db)
    try:
        return svc.list_orders(user_id)
    except HANDLED as e:
        raise to_http(e)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.get_order(order_id, user_id)
    except HANDLED as e:
        raise to_http(e)
