# acaishop/services/lock_service.py
import uuid

import redis

from acaishop.utils.retry import redis_retry
from acaishop.utils.settings import REDIS_URL
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)

# compare-and-delete in one atomic step: only the holder's token may release
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    Cross-worker job locks in redis.
    SET NX EX takes the lock, the TTL frees it if the holder dies.
    """

    def __init__(self, url: str | None = None, client=None):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)

    @staticmethod
    def _key(job: str) -> str:
        return f"job:{job}:lock"

    @redis_retry()
    def _set(self, key: str, token: str, ttl: int):
        return self.redis.set(name=key, value=token, nx=True, ex=ttl)

    def acquire(self, job: str, ttl: int) -> str | None:
        """Returns the holder token, or None when someone else holds the lock."""
        # same token on every retry of the SET
        token = str(uuid.uuid4())
        if self._set(self._key(job), token, ttl):
            logger.info(f"Acquired lock for {job}")
            return token
        logger.info(f"Lock for {job} is held elsewhere")
        return None

    @redis_retry()
    def release(self, job: str, token: str) -> bool:
        res = self.redis.eval(_RELEASE_LUA, 1, self._key(job), token)
        logger.info(f"Released lock for {job}: {bool(res)}")
        return bool(res)
