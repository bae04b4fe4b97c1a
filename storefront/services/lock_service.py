import uuid

import redis

from storefront.utils.logging import get_logger
from storefront.utils.retry import redis_retry
from storefront.utils.settings import CHECKOUT_LOCK_TTL_SECONDS, REDIS_URL

logger = get_logger(__name__)

# compare-and-delete in one script so a lock that expired and was re-taken
# by another checkout is never released by the old holder
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    -checkout lock per subject (SET NX EX)
    -release only by the token that took it
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(subject_id: str) -> str:
        return f"checkout:{subject_id}:lock"

    @redis_retry()
    def acquire_checkout_lock(self, subject_id: str, ttl: int = CHECKOUT_LOCK_TTL_SECONDS) -> str | None:
        key = self._key(subject_id)
        token = uuid.uuid4().hex
        logger.info(f"Acquire lock {key}")
        #SET checkout:<sub>:lock <token> NX EX <ttl>
        if self.redis.set(name=key, value=token, nx=True, ex=ttl):
            return token
        return None

    @redis_retry()
    def release_checkout_lock(self, subject_id: str, token: str) -> bool:
        key = self._key(subject_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
