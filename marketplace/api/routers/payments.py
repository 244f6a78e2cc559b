# marketplace/api/routers/payments.py
from fastapi import APIRouter, Depends

from marketplace.api.deps import get_payment_gateway
from marketplace.domain.schemas import PaymentVerifyIn, PaymentVerifyOut
from marketplace.services.payment_gateway import PaymentGatewayClient
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/verify", response_model=PaymentVerifyOut)
def verify_payment(
    payload: PaymentVerifyIn,
    gateway: PaymentGatewayClient = Depends(get_payment_gateway),
):
    """Signature check of a widget success payload. The secret never leaves the server."""
    verified = gateway.verify_signature(payload.gateway_order_id, payload.payment_id, payload.signature)
    if not verified:
        logger.error(f"Payment signature verification failed for payment {payload.payment_id}")
    return {"verified": verified}
