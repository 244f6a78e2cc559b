# marketplace/data/seed.py
from decimal import Decimal

from marketplace.data.database import SessionLocal
from marketplace.data.models.delivery_method import DeliveryMethodModel

DEFAULT_DELIVERY_METHODS = [
    {"name": "Standard Delivery", "description": "Delivered by road freight", "base_cost": Decimal("50.00"), "estimated_days": 5},
    {"name": "Express Delivery", "description": "Priority dispatch", "base_cost": Decimal("150.00"), "estimated_days": 2},
    {"name": "Freight (Bulk)", "description": "Palletised shipments for bulk orders", "base_cost": Decimal("500.00"), "estimated_days": 7},
]


def seed():
    db = SessionLocal()
    try:
        #not forcing: only seed if empty
        if db.query(DeliveryMethodModel).first():
            return
        db.add_all(DeliveryMethodModel(**m) for m in DEFAULT_DELIVERY_METHODS)
        db.commit()
    finally:
        db.close()
