"""Redis client construction."""

import redis.asyncio as redis


async def create_redis(url: str) -> redis.Redis:
    """Create a Redis client and verify connectivity."""
    client = redis.from_url(
        url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    return client
