# marketplace/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        #flush only - the caller owns the transaction
        self.db.add(order)
        self.db.flush()
        return order

    def add_order_items(self, items: list[OrderItemModel]):
        self.db.add_all(items)
        self.db.flush()

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_by_checkout_ref(self, checkout_ref: str) -> OrderModel | None:
        stmt = select(OrderModel).where(OrderModel.checkout_ref == checkout_ref)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_buyer(self, buyer_id: str) -> list[OrderModel]:
        stmt = (
            select(OrderModel)
            .where(OrderModel.buyer_id == buyer_id)
            .order_by(OrderModel.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_for_seller(self, seller_id: str) -> list[OrderModel]:
        stmt = (
            select(OrderModel)
            .where(
                OrderModel.id.in_(
                    select(OrderItemModel.order_id).where(OrderItemModel.seller_id == seller_id)
                )
            )
            .order_by(OrderModel.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_all(self) -> list[OrderModel]:
        stmt = select(OrderModel).order_by(OrderModel.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())
