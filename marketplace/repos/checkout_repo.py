# marketplace/repos/checkout_repo.py
import redis

from marketplace.domain.checkout import CheckoutState
from marketplace.utils.retry import redis_retry
from marketplace.utils.settings import CHECKOUT_TTL_SECONDS
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutRepo:
    """
    Checkout attempts live in redis only, as JSON with a TTL.
    They never touch the relational store; an expired key is an abandoned checkout.
    """

    def __init__(self, client: redis.Redis, ttl: int = CHECKOUT_TTL_SECONDS):
        self.redis = client
        self.ttl = ttl

    @staticmethod
    def _key(checkout_id: str) -> str:
        return f"checkout:{checkout_id}:state"

    @redis_retry()
    def get(self, checkout_id: str) -> CheckoutState | None:
        raw = self.redis.get(self._key(checkout_id))
        if raw is None:
            return None
        return CheckoutState.model_validate_json(raw)

    @redis_retry()
    def save(self, state: CheckoutState) -> CheckoutState:
        #every write extends the session
        self.redis.set(self._key(state.id), state.model_dump_json(), ex=self.ttl)
        return state

    @redis_retry()
    def delete(self, checkout_id: str) -> bool:
        logger.info(f"Discarding checkout {checkout_id}")
        return bool(self.redis.delete(self._key(checkout_id)))
