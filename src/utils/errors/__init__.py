"""Excecoes utilitarias compartilhadas."""

from .exceptions import (
    InfrastructureError,
    LockAcquisitionError,
    RedisConnectionError,
)

__all__ = [
    "InfrastructureError",
    "LockAcquisitionError",
    "RedisConnectionError",
]
