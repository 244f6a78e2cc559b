# marketplace/api/routers/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.deps import HANDLED, current_user_id, to_http
from marketplace.data.database import get_db
from marketplace.domain.schemas import (
    ProductCreate,
    ProductOut,
    ProductRatingOut,
    ReviewIn,
    ReviewOut,
)
from marketplace.services.product_service import ProductService
from marketplace.services.review_service import ReviewService

router = APIRouter(prefix="/products", tags=["products"])


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return ProductService(db).create_product(user_id, payload)
    except HANDLED as e:
        raise to_http(e)


@router.get("/", response_model=List[ProductOut])
def list_products(
    seller_id: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return ProductService(db).list_products(seller_id=seller_id, category=category)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: Session = Depends(get_db)):
    try:
        return ProductService(db).get_product(product_id)
    except HANDLED as e:
        raise to_http(e)


@router.post("/{product_id}/reviews", response_model=ReviewOut, status_code=201)
def create_review(
    product_id: str,
    payload: ReviewIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return ReviewService(db).create_review(user_id, product_id, payload)
    except HANDLED as e:
        raise to_http(e)


@router.get("/{product_id}/reviews", response_model=List[ReviewOut])
def list_reviews(product_id: str, db: Session = Depends(get_db)):
    return ReviewService(db).list_reviews(product_id)


@router.get("/{product_id}/rating", response_model=ProductRatingOut)
def product_rating(product_id: str, db: Session = Depends(get_db)):
    return ReviewService(db).product_rating(product_id)
