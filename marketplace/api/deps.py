# marketplace/api/deps.py
import redis
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.errors import (
    CheckoutBusyError,
    MarketplaceError,
    NotFoundError,
    OrderPersistenceError,
    PaymentGatewayError,
    PaymentVerificationError,
    RemoteFetchError,
    ValidationError,
)
from marketplace.repos.checkout_repo import CheckoutRepo
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.lock_service import LockService
from marketplace.services.payment_gateway import PaymentGatewayClient
from marketplace.utils.settings import REDIS_URL

_STATUS = [
    (ValidationError, 400),
    (NotFoundError, 404),
    (CheckoutBusyError, 409),
    (PaymentVerificationError, 402),
    (PaymentGatewayError, 502),
    (RemoteFetchError, 503),
    (OrderPersistenceError, 500),
]


def to_http(e: Exception) -> HTTPException:
    if isinstance(e, PermissionError):
        return HTTPException(status_code=403, detail=str(e))
    for exc_type, status in _STATUS:
        if isinstance(e, exc_type):
            return HTTPException(status_code=status, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


HANDLED = (MarketplaceError, PermissionError)


def current_user_id(x_user_id: str = Header(..., alias="X-User-Id")) -> str:
    #identity provider accessor - the gateway in front sets the header
    if not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing user")
    return x_user_id.strip()


_redis_client = None


def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.Redis.from_url(REDIS_URL, decode_responses=True)
    return _redis_client


def get_payment_gateway() -> PaymentGatewayClient:
    return PaymentGatewayClient()


def get_checkout_service(
    db: Session = Depends(get_db),
    client: redis.Redis = Depends(get_redis),
    gateway: PaymentGatewayClient = Depends(get_payment_gateway),
) -> CheckoutService:
    return CheckoutService(
        db=db,
        checkout_repo=CheckoutRepo(client),
        lock_service=LockService(client=client),
        gateway=gateway,
    )
