# marketplace/repos/review_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.review import ReviewModel


class ReviewRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_review(self, review_id: str) -> ReviewModel | None:
        return self.db.get(ReviewModel, review_id)

    def get_by_buyer(self, product_id: str, buyer_id: str) -> ReviewModel | None:
        stmt = select(ReviewModel).where(
            ReviewModel.product_id == product_id,
            ReviewModel.buyer_id == buyer_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_product(self, product_id: str) -> list[ReviewModel]:
        stmt = (
            select(ReviewModel)
            .where(ReviewModel.product_id == product_id)
            .order_by(ReviewModel.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def ratings_for_products(self, product_ids: list[str]) -> list[tuple[str, int]]:
        stmt = select(ReviewModel.product_id, ReviewModel.rating).where(
            ReviewModel.product_id.in_(product_ids)
        )
        return [(pid, rating) for pid, rating in self.db.execute(stmt).all()]

    def save(self, review: ReviewModel) -> ReviewModel:
        self.db.add(review)
        self.db.commit()
        self.db.refresh(review)
        return review
