# marketplace/services/product_service.py
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.domain.errors import NotFoundError
from marketplace.domain.schemas import ProductCreate
from marketplace.repos.product_repo import ProductRepo
from marketplace.services.user_service import UserService
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.users = UserService(db)

    def create_product(self, seller_id: str, payload: ProductCreate) -> ProductModel:
        self.users.require_role(seller_id, "seller", "admin")

        product = ProductModel(seller_id=seller_id, **payload.model_dump())
        created = self.repo.create_product(product)
        logger.info(f"Seller {seller_id} listed product {created.id} at {created.price}")
        return created

    def get_product(self, product_id: str) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def list_products(self, seller_id: str | None = None, category: str | None = None) -> list[ProductModel]:
        return self.repo.list_products(seller_id=seller_id, category=category)
