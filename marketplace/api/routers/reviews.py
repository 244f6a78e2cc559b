# marketplace/api/routers/reviews.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api.deps import HANDLED, current_user_id, to_http
from marketplace.data.database import get_db
from marketplace.domain.schemas import ReviewIn, ReviewOut
from marketplace.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.put("/{review_id}", response_model=ReviewOut)
def update_review(
    review_id: str,
    payload: ReviewIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        return ReviewService(db).update_review(user_id, review_id, payload)
    except HANDLED as e:
        raise to_http(e)
