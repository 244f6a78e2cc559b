# marketplace/services/payment_gateway.py
import hashlib
import hmac
from decimal import Decimal, ROUND_HALF_UP

import requests
from requests import RequestException

from marketplace.domain.errors import PaymentGatewayError
from marketplace.utils.retry import http_retry
from marketplace.utils.settings import (
    PAYMENT_GATEWAY_URL,
    PAYMENT_KEY_ID,
    PAYMENT_KEY_SECRET,
    PAYMENT_SCRIPT_URL,
)
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def to_minor_units(amount: Decimal) -> int:
    #gateway works in the smallest currency unit (paise)
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_signature(secret: str, gateway_order_id: str, payment_id: str) -> str:
    body = f"{gateway_order_id}|{payment_id}"
    return hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_payment_signature(secret: str, gateway_order_id: str, payment_id: str, signature: str | None) -> bool:
    if not secret or not signature:
        return False
    expected = compute_signature(secret, gateway_order_id, payment_id)
    return hmac.compare_digest(expected, str(signature).strip())


class PaymentGatewayClient:
    """
    Client for the hosted checkout gateway.
    -creates gateway orders the widget is opened with
    -checks the widget script can be served
    -verifies the signed success callback (secret stays server side)
    """

    def __init__(
        self,
        base_url: str | None = None,
        key_id: str | None = None,
        key_secret: str | None = None,
        script_url: str | None = None,
        timeout: int = 5,
    ):
        self.base_url = (base_url or PAYMENT_GATEWAY_URL).rstrip("/")
        self.key_id = key_id if key_id is not None else PAYMENT_KEY_ID
        self.key_secret = key_secret if key_secret is not None else PAYMENT_KEY_SECRET
        self.script_url = script_url or PAYMENT_SCRIPT_URL
        self.timeout = timeout

    @http_retry()
    def _post_order(self, payload: dict) -> dict:
        url = f"{self.base_url}/v1/orders"
        logger.info(f"PaymentGatewayClient POST {url} receipt={payload['receipt']}")

        resp = requests.post(
            url,
            json=payload,
            auth=(self.key_id, self.key_secret),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def create_order(self, amount: Decimal, currency: str, receipt: str) -> dict:
        payload = {
            "amount": to_minor_units(amount),
            "currency": currency,
            "receipt": receipt,
            "notes": {"order_id": receipt},
        }

        try:
            data = self._post_order(payload)
        except RequestException as e:
            logger.error(f"Gateway order creation failed for {receipt}: {e}")
            raise PaymentGatewayError("Failed to create payment order") from e

        if not data.get("id"):
            raise PaymentGatewayError("Failed to create payment order")

        return {
            "gateway_order_id": data["id"],
            "amount": data.get("amount", payload["amount"]),
            "currency": data.get("currency", currency),
            "receipt": data.get("receipt", receipt),
        }

    @http_retry()
    def _fetch_script(self):
        resp = requests.get(self.script_url, timeout=self.timeout)
        resp.raise_for_status()

    def load_checkout_script(self) -> bool:
        try:
            self._fetch_script()
        except RequestException as e:
            logger.warning(f"Payment widget script unavailable: {e}")
            return False
        return True

    def verify_signature(self, gateway_order_id: str, payment_id: str, signature: str | None) -> bool:
        return verify_payment_signature(self.key_secret, gateway_order_id, payment_id, signature)
