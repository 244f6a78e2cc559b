# marketplace/services/rfq_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from marketplace.data.models.rfq import RFQModel
from marketplace.domain.errors import NotFoundError, ValidationError
from marketplace.domain.pricing import money
from marketplace.domain.schemas import RFQCreate, RFQResponseIn
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.rfq_repo import RFQRepo
from marketplace.services.user_service import UserService
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def quoted_total(quoted_price: Decimal | None, quantity: int) -> Decimal | None:
    if quoted_price is None:
        return None
    return money(Decimal(quoted_price) * quantity)


def rfq_to_dict(rfq: RFQModel) -> Dict[str, Any]:
    return {
        "id": rfq.id,
        "product_id": rfq.product_id,
        "buyer_id": rfq.buyer_id,
        "seller_id": rfq.seller_id,
        "quantity": rfq.quantity,
        "message": rfq.message,
        "company_name": rfq.company_name,
        "contact_person": rfq.contact_person,
        "email": rfq.email,
        "phone": rfq.phone,
        "status": rfq.status,
        "quoted_price": rfq.quoted_price,
        "quoted_total": quoted_total(rfq.quoted_price, rfq.quantity),
        "seller_response": rfq.seller_response,
        "response_date": rfq.response_date,
        "created_at": rfq.created_at,
    }


class RFQService:
    """Request for quotation: buyer asks, the product's seller quotes a unit price."""

    def __init__(self, db: Session):
        self.repo = RFQRepo(db)
        self.products = ProductRepo(db)
        self.users = UserService(db)

    def create_rfq(self, buyer_id: str, payload: RFQCreate) -> Dict[str, Any]:
        self.users.require_role(buyer_id, "buyer")

        product = self.products.get_product(payload.product_id)
        if not product:
            raise NotFoundError("Product not found")

        rfq = RFQModel(
            seller_id=product.seller_id,
            buyer_id=buyer_id,
            status="pending",
            **payload.model_dump(),
        )
        created = self.repo.save(rfq)
        logger.info(f"RFQ {created.id}: buyer {buyer_id} asks {payload.quantity} x {product.id}")
        return rfq_to_dict(created)

    def respond(self, seller_id: str, rfq_id: str, payload: RFQResponseIn) -> Dict[str, Any]:
        rfq = self.repo.get_rfq(rfq_id)
        if not rfq:
            raise NotFoundError("RFQ not found")

        if rfq.seller_id != seller_id:
            raise PermissionError("Only the product's seller can respond to this RFQ")

        if not payload.response.strip():
            raise ValidationError("Response text is required")

        rfq.quoted_price = payload.quoted_price
        rfq.seller_response = payload.response.strip()
        rfq.response_date = datetime.now(timezone.utc)
        rfq.status = "responded"
        saved = self.repo.save(rfq)

        logger.info(
            f"RFQ {rfq_id} quoted at {payload.quoted_price} per unit, "
            f"total {quoted_total(payload.quoted_price, rfq.quantity)}"
        )
        return rfq_to_dict(saved)

    def list_rfqs(self, user_id: str) -> list[Dict[str, Any]]:
        user = self.users.require_role(user_id)

        if user.role == "buyer":
            rfqs = self.repo.list_rfqs(buyer_id=user_id)
        elif user.role == "seller":
            rfqs = self.repo.list_rfqs(seller_id=user_id)
        else:
            rfqs = self.repo.list_rfqs()

        return [rfq_to_dict(r) for r in rfqs]
