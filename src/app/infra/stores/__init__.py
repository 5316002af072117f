"""Stores — implementações concretas de persistência e coordenação.

Módulos disponíveis:
    - memory_stores: Agendamentos, pagamentos e jobs em memória (dev/test)
    - provider_locks: Lock por prestador (memória ou Redis)
    - redis_job_scheduler: Registro de jobs de cobrança usando Redis (Upstash)
"""

from __future__ import annotations

from app.infra.stores.memory_stores import (
    MemoryAppointmentStore,
    MemoryJobScheduler,
    MemoryPaymentStore,
)
from app.infra.stores.provider_locks import MemoryProviderLock, RedisProviderLock
from app.infra.stores.redis_job_scheduler import RedisJobScheduler

__all__ = [
    # Memory (dev/test)
    "MemoryAppointmentStore",
    "MemoryJobScheduler",
    "MemoryPaymentStore",
    "MemoryProviderLock",
    # Redis (Upstash)
    "RedisJobScheduler",
    "RedisProviderLock",
]
