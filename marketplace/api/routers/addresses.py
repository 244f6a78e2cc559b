# marketplace/api/routers/addresses.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api.deps import HANDLED, current_user_id, to_http
from marketplace.data.database import get_db
from marketplace.domain.schemas import AddressCreate, AddressOut
from marketplace.services.address_service import AddressService

router = APIRouter(prefix="/addresses", tags=["addresses"])


@router.get("/", response_model=List[AddressOut])
def list_addresses(
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return AddressService(db).list_addresses(user_id)
    except HANDLED as e:
        raise to_http(e)


@router.post("/", response_model=AddressOut, status_code=201)
def create_address(
    payload: AddressCreate,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return AddressService(db).create_address(user_id, payload)
    except HANDLED as e:
        raise to_http(e)
