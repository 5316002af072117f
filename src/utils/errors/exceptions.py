"""Excecoes para falhas recuperaveis de infraestrutura."""

from __future__ import annotations


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitorias."""


class RedisConnectionError(InfrastructureError):
    """Falha de conexao/timeout ao acessar Redis."""


class LockAcquisitionError(InfrastructureError):
    """Lock do prestador nao obtido dentro do timeout."""

    def __init__(self, provider_ref: str, timeout_seconds: float) -> None:
        super().__init__(
            f"Could not lock schedule of provider {provider_ref} "
            f"within {timeout_seconds}s"
        )
        self.provider_ref = provider_ref
        self.timeout_seconds = timeout_seconds
