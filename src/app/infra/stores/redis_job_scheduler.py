"""Registro Redis de jobs de cobranca diferida.

Um hash por job, com o horario de execucao (ISO 8601) e o payload (JSON).
O worker que executa os jobs fica fora deste servico e consome o mesmo
registro.

Contrato de Keys:
    job_name e deterministico (ex.: Charge-Appointment-<id>) e nao
    carrega dados pessoais.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from redis.exceptions import RedisError

from app.protocols.job_scheduler import JobSchedulerProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from redis import Redis

logger = logging.getLogger(__name__)

# Prefixo para namespace de jobs
JOB_PREFIX = "job:"


def _decode(value: bytes | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisJobScheduler(JobSchedulerProtocol):
    """JobScheduler usando Redis (Upstash compatível).

    Args:
        redis_client: Cliente Redis síncrono
    """

    def __init__(self, redis_client: Redis[bytes]) -> None:
        self._redis = redis_client

    def _key(self, job_name: str) -> str:
        """Gera chave Redis com namespace."""
        return f"{JOB_PREFIX}{job_name}"

    def schedule(self, job_name: str, run_at: datetime, payload: dict[str, Any]) -> None:
        """Agenda (ou substitui) o job."""
        try:
            self._redis.hset(
                self._key(job_name),
                mapping={
                    "run_at": run_at.isoformat(),
                    "payload": json.dumps(payload),
                },
            )
        except RedisError as exc:
            raise RedisConnectionError("Falha ao agendar job no Redis") from exc
        logger.debug("job_scheduled", extra={"job_name": job_name, "run_at": run_at.isoformat()})

    def cancel(self, job_name: str) -> bool:
        """Remove o job. Retorna False se nao existia."""
        try:
            deleted = self._redis.delete(self._key(job_name))
        except RedisError as exc:
            raise RedisConnectionError("Falha ao cancelar job no Redis") from exc
        return bool(deleted)

    def run_time_of(self, job_name: str) -> datetime | None:
        """Horario de execucao do job, ou None se nao existe."""
        try:
            raw = self._redis.hget(self._key(job_name), "run_at")
        except RedisError as exc:
            raise RedisConnectionError("Falha ao consultar job no Redis") from exc
        value = _decode(raw)
        if not value:
            return None
        return datetime.fromisoformat(value)

    def payload_of(self, job_name: str) -> dict[str, Any] | None:
        """Payload do job, ou None se nao existe."""
        try:
            raw = self._redis.hget(self._key(job_name), "payload")
        except RedisError as exc:
            raise RedisConnectionError("Falha ao consultar job no Redis") from exc
        value = _decode(raw)
        if value is None:
            return None
        loaded = json.loads(value)
        return loaded if isinstance(loaded, dict) else None
