# marketplace/services/saved_product_service.py
from sqlalchemy.orm import Session

from marketplace.data.models.saved_product import SavedProductModel
from marketplace.domain.errors import NotFoundError, ValidationError
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.saved_product_repo import SavedProductRepo
from marketplace.services.user_service import UserService
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class SavedProductService:
    """Buyer's saved list (wishlist), newest first."""

    def __init__(self, db: Session):
        self.repo = SavedProductRepo(db)
        self.products = ProductRepo(db)
        self.users = UserService(db)

    def list_saved(self, buyer_id: str) -> list[SavedProductModel]:
        return self.repo.list_for_buyer(buyer_id)

    def save_product(self, buyer_id: str, product_id: str) -> SavedProductModel:
        self.users.require_role(buyer_id, "buyer")

        if not self.products.get_product(product_id):
            raise NotFoundError("Product not found")

        if self.repo.get_by_product(buyer_id, product_id):
            raise ValidationError("Product is already in your saved list")

        saved = self.repo.save(SavedProductModel(buyer_id=buyer_id, product_id=product_id))
        logger.info(f"Buyer {buyer_id} saved product {product_id}")
        return saved

    def remove(self, buyer_id: str, saved_id: str):
        saved = self.repo.get(saved_id)
        if not saved:
            raise NotFoundError("Saved product not found")
        if saved.buyer_id != buyer_id:
            raise PermissionError("No access to this saved product")

        self.repo.delete(saved)
        logger.info(f"Buyer {buyer_id} removed saved product {saved.product_id}")
