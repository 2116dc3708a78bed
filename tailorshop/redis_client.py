import redis.asyncio as redis
from tailorshop.config import settings

_redis: redis.Redis | None = None

REVOKED_KEY_PREFIX = "revoked:"


async def get_redis() -> redis.Redis:
    global _redis
    if _redis is None:
        _redis = redis.from_url(settings.redis_url, decode_responses=True)
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


async def revoke_token(jti: str, ttl_seconds: int) -> None:
    """
    Deny-list a token id until the token would have expired anyway.
    Already expired tokens (ttl <= 0) need no entry.
    """
    if ttl_seconds <= 0:
        return
    r = await get_redis()
    await r.set(f"{REVOKED_KEY_PREFIX}{jti}", "1", ex=ttl_seconds)


async def is_token_revoked(jti: str) -> bool:
    r = await get_redis()
    return bool(await r.exists(f"{REVOKED_KEY_PREFIX}{jti}"))
