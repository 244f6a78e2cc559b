from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, String, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship

from marketplace.data.database import Base, new_id


class SavedProductModel(Base):
    __tablename__ = "saved_products"

    id = Column(String(36), primary_key=True, default=new_id)
    buyer_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    product = relationship("ProductModel", lazy="joined")

    __table_args__ = (UniqueConstraint("buyer_id", "product_id", name="u_saved_buyer_product"),)
