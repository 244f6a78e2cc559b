from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Text

from marketplace.data.database import Base, new_id


class RFQModel(Base):
    __tablename__ = "rfqs"

    id = Column(String(36), primary_key=True, default=new_id)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    buyer_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    seller_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    message = Column(Text, nullable=True)
    company_name = Column(String, nullable=False)
    contact_person = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String(20), nullable=True)

    status = Column(String(20), nullable=False, default="pending")  # pending, responded
    quoted_price = Column(Numeric(12, 2), nullable=True)
    seller_response = Column(Text, nullable=True)
    response_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
