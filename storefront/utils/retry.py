# storefront/utils/retry.py
import redis
import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from storefront.domain.errors import ConcurrencyConflictError
from storefront.utils.settings import CART_CONFLICT_RETRIES


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def conflict_retry():
    # the whole read-modify-write is replayed, so every attempt starts from a fresh read
    return retry(
        reraise=True,
        stop=stop_after_attempt(CART_CONFLICT_RETRIES),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
        retry=retry_if_exception_type(ConcurrencyConflictError),
    )
