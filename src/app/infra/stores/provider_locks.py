"""Locks por prestador — ponto de serializacao do check-then-commit.

Dois backends:
- MemoryProviderLock: threading.Lock por prestador (processo unico)
- RedisProviderLock: lock do redis-py (varios processos/instancias)

Contrato de Keys:
    provider_ref deve ser id opaco; nunca dados pessoais.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from redis.exceptions import LockError, RedisError

from app.protocols.appointment_store import ProviderLockProtocol
from utils.errors import LockAcquisitionError, RedisConnectionError

if TYPE_CHECKING:
    from redis import Redis

logger = logging.getLogger(__name__)

# Prefixo para namespace de locks
LOCK_PREFIX = "provider-lock:"


class MemoryProviderLock(ProviderLockProtocol):
    """Lock por prestador em memória — apenas dev/test ou processo unico."""

    def __init__(self, blocking_timeout_seconds: float = 10.0) -> None:
        self._blocking_timeout = blocking_timeout_seconds
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, provider_ref: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(provider_ref)
            if lock is None:
                lock = threading.Lock()
                self._locks[provider_ref] = lock
            return lock

    @contextmanager
    def hold(self, provider_ref: str) -> Iterator[None]:
        lock = self._lock_for(provider_ref)
        if not lock.acquire(timeout=self._blocking_timeout):
            logger.warning(
                "provider_lock_timeout",
                extra={"provider_ref": provider_ref, "backend": "memory"},
            )
            raise LockAcquisitionError(provider_ref, self._blocking_timeout)
        try:
            yield
        finally:
            lock.release()


class RedisProviderLock(ProviderLockProtocol):
    """Lock por prestador usando Redis (Upstash compatível).

    Args:
        redis_client: Cliente Redis síncrono
        timeout_seconds: Tempo maximo de retencao (expira se o processo morrer)
        blocking_timeout_seconds: Tempo maximo de espera pelo lock
    """

    def __init__(
        self,
        redis_client: Redis[bytes],
        *,
        timeout_seconds: float = 30.0,
        blocking_timeout_seconds: float = 10.0,
    ) -> None:
        self._redis = redis_client
        self._timeout = timeout_seconds
        self._blocking_timeout = blocking_timeout_seconds

    def _key(self, provider_ref: str) -> str:
        """Gera chave Redis com namespace."""
        return f"{LOCK_PREFIX}{provider_ref}"

    @contextmanager
    def hold(self, provider_ref: str) -> Iterator[None]:
        lock = self._redis.lock(
            self._key(provider_ref),
            timeout=self._timeout,
            blocking_timeout=self._blocking_timeout,
        )
        try:
            acquired = lock.acquire(blocking=True)
        except RedisError as exc:
            raise RedisConnectionError("Falha ao obter lock do prestador no Redis") from exc
        if not acquired:
            logger.warning(
                "provider_lock_timeout",
                extra={"provider_ref": provider_ref, "backend": "redis"},
            )
            raise LockAcquisitionError(provider_ref, self._blocking_timeout)

        try:
            yield
        finally:
            try:
                lock.release()
            except LockError:
                # Lock expirou durante a operacao (timeout de retencao)
                logger.warning(
                    "provider_lock_expired",
                    extra={"provider_ref": provider_ref, "timeout_seconds": self._timeout},
                )
