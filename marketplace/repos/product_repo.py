# marketplace/repos/product_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: str) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list_products(self, seller_id: str | None = None, category: str | None = None) -> list[ProductModel]:
        stmt = select(ProductModel).where(ProductModel.status == "active")
        if seller_id:
            stmt = stmt.where(ProductModel.seller_id == seller_id)
        if category:
            stmt = stmt.where(ProductModel.category == category)
        return list(self.db.execute(stmt.order_by(ProductModel.created_at.desc())).scalars().all())

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product
