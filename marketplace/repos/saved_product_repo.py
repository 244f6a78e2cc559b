# marketplace/repos/saved_product_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.saved_product import SavedProductModel


class SavedProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, saved_id: str) -> SavedProductModel | None:
        return self.db.get(SavedProductModel, saved_id)

    def get_by_product(self, buyer_id: str, product_id: str) -> SavedProductModel | None:
        stmt = select(SavedProductModel).where(
            SavedProductModel.buyer_id == buyer_id,
            SavedProductModel.product_id == product_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_buyer(self, buyer_id: str) -> list[SavedProductModel]:
        stmt = (
            select(SavedProductModel)
            .where(SavedProductModel.buyer_id == buyer_id)
            .order_by(SavedProductModel.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def save(self, saved: SavedProductModel) -> SavedProductModel:
        self.db.add(saved)
        self.db.commit()
        self.db.refresh(saved)
        return saved

    def delete(self, saved: SavedProductModel):
        self.db.delete(saved)
        self.db.commit()
