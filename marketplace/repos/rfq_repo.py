# marketplace/repos/rfq_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.rfq import RFQModel


class RFQRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_rfq(self, rfq_id: str) -> RFQModel | None:
        return self.db.get(RFQModel, rfq_id)

    def list_rfqs(self, buyer_id: str | None = None, seller_id: str | None = None) -> list[RFQModel]:
        stmt = select(RFQModel)
        if buyer_id:
            stmt = stmt.where(RFQModel.buyer_id == buyer_id)
        if seller_id:
            stmt = stmt.where(RFQModel.seller_id == seller_id)
        return list(self.db.execute(stmt.order_by(RFQModel.created_at.desc())).scalars().all())

    def save(self, rfq: RFQModel) -> RFQModel:
        self.db.add(rfq)
        self.db.commit()
        self.db.refresh(rfq)
        return rfq
