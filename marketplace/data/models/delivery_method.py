from sqlalchemy import Column, Integer, String, Boolean, Numeric, Text

from marketplace.data.database import Base, new_id


class DeliveryMethodModel(Base):
    __tablename__ = "delivery_methods"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    base_cost = Column(Numeric(10, 2), nullable=False)
    estimated_days = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
