from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, String, DateTime, Boolean

from marketplace.data.database import Base, new_id


class AddressModel(Base):
    __tablename__ = "user_addresses"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    full_name = Column(String, nullable=False)
    phone = Column(String(20), nullable=False)
    address_line_1 = Column(String, nullable=False)
    address_line_2 = Column(String, nullable=True)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    postal_code = Column(String(12), nullable=False)
    country = Column(String, nullable=False, default="India")
    is_default = Column(Boolean, nullable=False, default=False)
    type = Column(String(10), nullable=False, default="shipping")
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "phone": self.phone,
            "address_line_1": self.address_line_1,
            "address_line_2": self.address_line_2,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }
