# marketplace/api/__init__.py
from fastapi import APIRouter

from marketplace.api.routers import (
    addresses,
    carts,
    checkout,
    delivery_methods,
    health,
    orders,
    payments,
    products,
    reviews,
    rfqs,
    saved_products,
    users,
)

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(users.router)
api_router.include_router(products.router)
api_router.include_router(reviews.router)
api_router.include_router(saved_products.router)
api_router.include_router(carts.router)
api_router.include_router(addresses.router)
api_router.include_router(delivery_methods.router)
api_router.include_router(checkout.router)
api_router.include_router(orders.router)
api_router.include_router(payments.router)
api_router.include_router(rfqs.router)
