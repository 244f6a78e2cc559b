# marketplace/repos/delivery_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.delivery_method import DeliveryMethodModel


class DeliveryMethodRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_active(self) -> list[DeliveryMethodModel]:
        stmt = (
            select(DeliveryMethodModel)
            .where(DeliveryMethodModel.is_active.is_(True))
            .order_by(DeliveryMethodModel.base_cost.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_method(self, method_id: str) -> DeliveryMethodModel | None:
        return self.db.get(DeliveryMethodModel, method_id)

    def create_method(self, method: DeliveryMethodModel) -> DeliveryMethodModel:
        self.db.add(method)
        self.db.commit()
        self.db.refresh(method)
        return method
