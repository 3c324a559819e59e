"""Redis-backed recovery session store. Expiry is delegated to Redis TTL."""

import json
from typing import Optional

from laundry_app.application.recovery_flow import RecoverySnapshot
from laundry_app.infrastructure.cache.redis_client import RedisClient

RECOVERY_KEY_PREFIX = "recovery:"


class RedisRecoverySessionStore:
    """Implements RecoverySessionStore on plain string keys with EX."""

    def __init__(self, redis_client: RedisClient) -> None:
        self._redis = redis_client

    async def save(self, snapshot: RecoverySnapshot, ttl_seconds: int) -> None:
        key = f"{RECOVERY_KEY_PREFIX}{snapshot.recovery_id}"
        await self._redis.set_cache(key, json.dumps(snapshot.to_dict()), ttl=ttl_seconds)

    async def get(self, recovery_id: str) -> Optional[RecoverySnapshot]:
        raw = await self._redis.get_cache(f"{RECOVERY_KEY_PREFIX}{recovery_id}")
        if not raw:
            return None
        return RecoverySnapshot.from_dict(json.loads(raw))

    async def delete(self, recovery_id: str) -> None:
        await self._redis.delete_key(f"{RECOVERY_KEY_PREFIX}{recovery_id}")
