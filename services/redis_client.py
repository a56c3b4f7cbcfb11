import logging
import time

import redis

from config import REDIS_URL

logger = logging.getLogger("api.redis")

r = redis.Redis.from_url(
    REDIS_URL,
    decode_responses=True,
    socket_keepalive=True,
    socket_connect_timeout=2,
    retry_on_timeout=True,
)


def ping_diagnostics(client=None) -> bool:
    client = client or r
    try:
        t0 = time.time()
        pong = client.ping()
        ms = int((time.time() - t0) * 1000)
        logger.info("redis_connected ping=%s latency_ms=%s", pong, ms)
        return bool(pong)
    except redis.RedisError as exc:
        logger.error("redis_ping_failed error=%s: %s", exc.__class__.__name__, exc)
        return False
