# marketplace/repos/cart_repo.py
from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from marketplace.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_items(self, buyer_id: str) -> list[CartItemModel]:
        stmt = (
            select(CartItemModel)
            .where(CartItemModel.buyer_id == buyer_id)
            .order_by(CartItemModel.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_cart_item(self, buyer_id: str, product_id: str) -> CartItemModel | None:
        stmt = select(CartItemModel).where(
            CartItemModel.buyer_id == buyer_id,
            CartItemModel.product_id == product_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_cart_item(self, buyer_id: str, product_id: str) -> int:
        res = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.buyer_id == buyer_id,
                CartItemModel.product_id == product_id,
            )
        )
        self.db.commit()
        return res.rowcount

    def clear(self, buyer_id: str, commit: bool = True) -> int:
        #commit=False lets the order transaction clear the cart together with the order rows
        res = self.db.execute(
            delete(CartItemModel).where(CartItemModel.buyer_id == buyer_id)
        )
        if commit:
            self.db.commit()
        return res.rowcount
