# laundry_app/infrastructure/cache/redis_client.py

from typing import Optional

import redis.asyncio as redis

from laundry_app.config.settings import settings


class RedisClient:
    def __init__(self, url: Optional[str] = None):
        self.client = redis.from_url(
            url or settings.redis_url,
            decode_responses=True,
        )

    async def set_cache(self, key: str, value: str, ttl: int = 300):
        await self.client.set(key, value, ex=ttl)

    async def get_cache(self, key: str):
        return await self.client.get(key)

    async def delete_key(self, key: str) -> None:
        """Delete a key."""
        await self.client.delete(key)

    async def hset(self, key: str, field: str, value: str) -> None:
        await self.client.hset(key, field, value)

    async def hget(self, key: str, field: str) -> str | None:
        """Get one hash field. Returns None if the field does not exist."""
        return await self.client.hget(key, field)

    async def hgetall(self, key: str) -> dict[str, str]:
        return await self.client.hgetall(key)

    async def hdel(self, key: str, field: str) -> None:
        await self.client.hdel(key, field)

    async def publish(self, channel: str, message: str) -> None:
        await self.client.publish(channel, message)

    def pubsub(self):
        """New pub/sub connection. Caller subscribes and closes it."""
        return self.client.pubsub()

    async def close(self) -> None:
        await self.client.aclose()
