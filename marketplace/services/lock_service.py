# marketplace/services/lock_service.py
import redis
from marketplace.utils.retry import redis_retry
from marketplace.utils.settings import REDIS_URL, CHECKOUT_LOCK_TTL_SECONDS
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

#LUA compare and delete, runs atomically in redis
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#lua scripts are single threaded in redis, nothing can run between GET and DEL
#so a stale holder can never delete a lock someone else took over after TTL


class LockService:
    """
    Busy flag for order placement.
    -one holder per checkout attempt (SET NX)
    -expires by itself (EX) if the process dies mid payment
    -release only by the holder token (lua)
    """

    def __init__(self, client: redis.Redis | None = None, url: str | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(checkout_id: str) -> str:
        return f"checkout:{checkout_id}:busy"

    @redis_retry()
    def acquire_checkout_lock(self, checkout_id: str, token: str, ttl: int = CHECKOUT_LOCK_TTL_SECONDS) -> bool:
        key = self._key(checkout_id)
        logger.info(f"Acquire lock {key}")
        #SET checkout:abc:busy "<token>" NX EX 900
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True,
                ex=ttl,
            )
        )

    @redis_retry()
    def release_checkout_lock(self, checkout_id: str, token: str) -> bool:
        key = self._key(checkout_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @redis_retry()
    def is_locked(self, checkout_id: str) -> bool:
        return self.redis.get(self._key(checkout_id)) is not None
