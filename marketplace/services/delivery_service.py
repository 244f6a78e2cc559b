# marketplace/services/delivery_service.py
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.data.models.delivery_method import DeliveryMethodModel
from marketplace.domain.checkout import DeliveryMethodSnapshot
from marketplace.domain.errors import NotFoundError, RemoteFetchError
from marketplace.domain.pricing import is_free_shipping, shipping_cost
from marketplace.domain.schemas import DeliveryMethodCreate
from marketplace.repos.delivery_repo import DeliveryMethodRepo
from marketplace.services.user_service import UserService
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class DeliveryMethodService:
    def __init__(self, db: Session):
        self.repo = DeliveryMethodRepo(db)
        self.users = UserService(db)

    def list_methods(self, subtotal: Decimal | None = None) -> list[dict]:
        """
        Active methods, cheapest first.
        With a subtotal, each method also carries the shipping cost the buyer would pay.
        """
        try:
            methods = self.repo.list_active()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load delivery methods: {e}")
            raise RemoteFetchError("Failed to load delivery options") from e

        out = []
        for m in methods:
            row = {
                "id": m.id,
                "name": m.name,
                "description": m.description,
                "base_cost": m.base_cost,
                "estimated_days": m.estimated_days,
                "is_active": m.is_active,
            }
            if subtotal is not None:
                row["shipping_cost"] = shipping_cost(subtotal, m.base_cost)
                row["free_shipping"] = is_free_shipping(subtotal, m.base_cost)
            out.append(row)
        return out

    def get_snapshot(self, method_id: str) -> DeliveryMethodSnapshot:
        try:
            method = self.repo.get_method(method_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load delivery method {method_id}: {e}")
            raise RemoteFetchError("Failed to load delivery options") from e

        if not method:
            raise NotFoundError("Delivery method not found")

        return DeliveryMethodSnapshot(
            id=method.id,
            name=method.name,
            base_cost=method.base_cost,
            estimated_days=method.estimated_days,
            is_active=method.is_active,
        )

    def create_method(self, user_id: str, payload: DeliveryMethodCreate) -> DeliveryMethodModel:
        self.users.require_role(user_id, "admin")
        return self.repo.create_method(DeliveryMethodModel(**payload.model_dump()))
