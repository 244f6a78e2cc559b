# marketplace/services/review_service.py
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.orm import Session

from marketplace.data.models.review import ReviewModel
from marketplace.domain.errors import NotFoundError, ValidationError
from marketplace.domain.schemas import ReviewIn
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.review_repo import ReviewRepo
from marketplace.services.user_service import UserService
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def aggregate_ratings(ratings: list[int]) -> tuple[float, int]:
    """Average rounded to one decimal, and the count. No ratings -> (0.0, 0)."""
    if not ratings:
        return 0.0, 0
    avg = Decimal(sum(ratings)) / len(ratings)
    return float(avg.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)), len(ratings)


class ReviewService:
    def __init__(self, db: Session):
        self.repo = ReviewRepo(db)
        self.products = ProductRepo(db)
        self.users = UserService(db)

    def create_review(self, buyer_id: str, product_id: str, payload: ReviewIn) -> ReviewModel:
        self.users.require_role(buyer_id, "buyer")

        if not self.products.get_product(product_id):
            raise NotFoundError("Product not found")

        if self.repo.get_by_buyer(product_id, buyer_id):
            raise ValidationError("You have already reviewed this product")

        review = self.repo.save(
            ReviewModel(
                product_id=product_id,
                buyer_id=buyer_id,
                rating=payload.rating,
                review_text=payload.review_text,
            )
        )
        logger.info(f"Review {review.id}: {payload.rating}/5 for product {product_id}")
        return review

    def update_review(self, buyer_id: str, review_id: str, payload: ReviewIn) -> ReviewModel:
        review = self.repo.get_review(review_id)
        if not review:
            raise NotFoundError("Review not found")
        if review.buyer_id != buyer_id:
            raise PermissionError("You can only edit your own review")

        review.rating = payload.rating
        review.review_text = payload.review_text
        review.updated_at = datetime.now(timezone.utc)
        return self.repo.save(review)

    def list_reviews(self, product_id: str) -> list[ReviewModel]:
        return self.repo.list_for_product(product_id)

    def product_ratings(self, product_ids: list[str]) -> dict[str, dict]:
        grouped = defaultdict(list)
        for pid, rating in self.repo.ratings_for_products(product_ids):
            grouped[pid].append(rating)

        out = {}
        for pid in product_ids:
            avg, count = aggregate_ratings(grouped.get(pid, []))
            out[pid] = {"product_id": pid, "average_rating": avg, "review_count": count}
        return out

    def product_rating(self, product_id: str) -> dict:
        return self.product_ratings([product_id])[product_id]
