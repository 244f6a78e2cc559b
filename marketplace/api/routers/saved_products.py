# marketplace/api/routers/saved_products.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api.deps import HANDLED, current_user_id, to_http
from marketplace.data.database import get_db
from marketplace.domain.schemas import SavedProductIn, SavedProductOut
from marketplace.services.saved_product_service import SavedProductService

router = APIRouter(prefix="/saved-products", tags=["saved-products"])


@router.get("/", response_model=List[SavedProductOut])
def list_saved_products(
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    return SavedProductService(db).list_saved(user_id)


@router.post("/", response_model=SavedProductOut, status_code=201)
def save_product(
    payload: SavedProductIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return SavedProductService(db).save_product(user_id, payload.product_id)
    except HANDLED as e:
        raise to_http(e)


@router.delete("/{saved_id}", status_code=204)
def remove_saved_product(
    saved_id: str,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        SavedProductService(db).remove(user_id, saved_id)
    except HANDLED as e:
        raise to_http(e)
