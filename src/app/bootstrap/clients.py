"""Factory do cliente Redis compartilhado pelo lock e pelo registro de jobs."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from config.settings import get_base_settings, get_booking_settings

if TYPE_CHECKING:
    from redis import Redis

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def create_redis_client() -> Redis[bytes]:
    """Cria cliente Redis síncrono (singleton).

    socket_timeout acompanha o tempo de espera do lock por prestador.

    Raises:
        ValueError: Se REDIS_URL não configurado
    """
    import redis

    redis_url = get_base_settings().redis_url
    if not redis_url:
        msg = "REDIS_URL não configurado (lock por prestador / registro de jobs)"
        raise ValueError(msg)

    timeout = get_booking_settings().lock_blocking_timeout_seconds
    client: Redis[bytes] = redis.from_url(
        redis_url,
        decode_responses=False,
        socket_timeout=timeout,
        socket_connect_timeout=min(timeout, 5.0),
        retry_on_timeout=True,
    )

    host = client.connection_pool.connection_kwargs.get("host", "unknown")
    logger.info("redis_client_created", extra={"host": host, "socket_timeout": timeout})
    return client
