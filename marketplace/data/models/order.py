from sqlalchemy import Column, ForeignKey, String, DateTime, Numeric, Text, JSON
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from marketplace.data.database import Base, new_id


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)
    order_number = Column(String(40), nullable=False, unique=True)
    #one order per checkout attempt
    checkout_ref = Column(String(36), nullable=False, unique=True)
    buyer_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default="pending")
    subtotal = Column(Numeric(12, 2), nullable=False)
    shipping_cost = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(12, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)

    shipping_address = Column(JSON, nullable=False)
    billing_address = Column(JSON, nullable=True)
    delivery_method_id = Column(String(36), ForeignKey("delivery_methods.id"), nullable=True)
    special_instructions = Column(Text, nullable=True)
    payment_method = Column(String(20), nullable=True)

    gateway_order_id = Column(String, nullable=True)
    gateway_payment_id = Column(String, nullable=True)
    gateway_signature = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
