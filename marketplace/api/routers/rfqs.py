# marketplace/api/routers/rfqs.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api.deps import HANDLED, current_user_id, to_http
from marketplace.data.database import get_db
from marketplace.domain.schemas import RFQCreate, RFQOut, RFQResponseIn
from marketplace.services.rfq_service import RFQService

router = APIRouter(prefix="/rfqs", tags=["rfqs"])


@router.post("/", response_model=RFQOut, status_code=201)
def create_rfq(
    payload: RFQCreate,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return RFQService(db).create_rfq(user_id, payload)
    except HANDLED as e:
        raise to_http(e)


@router.post("/{rfq_id}/respond", response_model=RFQOut)
def respond_to_rfq(
    rfq_id: str,
    payload: RFQResponseIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return RFQService(db).respond(user_id, rfq_id, payload)
    except HANDLED as e:
        raise to_http(e)


@router.get("/", response_model=List[RFQOut])
def list_rfqs(
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return RFQService(db).list_rfqs(user_id)
    except HANDLED as e:
        raise to_http(e)
