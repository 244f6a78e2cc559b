# marketplace/api/routers/delivery_methods.py
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.deps import HANDLED, current_user_id, to_http
from marketplace.data.database import get_db
from marketplace.domain.schemas import DeliveryMethodCreate, DeliveryMethodOut
from marketplace.services.delivery_service import DeliveryMethodService

router = APIRouter(prefix="/delivery-methods", tags=["delivery"])


@router.get("/", response_model=List[DeliveryMethodOut])
def list_delivery_methods(
    subtotal: Optional[Decimal] = Query(None, ge=0),
    db: Session = Depends(get_db),
):
    """Active methods, cheapest first; with ?subtotal= the effective shipping cost too."""
    try:
        return DeliveryMethodService(db).list_methods(subtotal)
    except HANDLED as e:
        raise to_http(e)


@router.post("/", response_model=DeliveryMethodOut, status_code=201)
def create_delivery_method(
    payload: DeliveryMethodCreate,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return DeliveryMethodService(db).create_method(user_id, payload)
    except HANDLED as e:
        raise to_http(e)
