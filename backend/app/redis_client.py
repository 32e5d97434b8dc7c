# backend/app/redis_client.py
"""
Shared Redis connection: rate-limit counters and the outbound event queue.
Booking occupancy never lives here.
"""

from redis import Redis

from .config import settings

redis_client = Redis.from_url(
    settings.redis_url,
    decode_responses=True,
    socket_timeout=settings.redis_socket_timeout,
    socket_connect_timeout=settings.redis_socket_timeout,
)
