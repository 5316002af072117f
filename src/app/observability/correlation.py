"""Contexto de log das operacoes do ciclo de vida.

Dois ContextVars (thread/async-safe):
- correlation_id: rastreia uma operacao do ciclo de vida ate a execucao
  dos efeitos colaterais que ela gerou
- provider_ref: prestador cujo lock esta retido pela operacao corrente

Uso:
    with correlation_scope(request_id):
        result = lifecycle.create(request)
    dispatcher.dispatch(result.side_effects, correlation_id=result.correlation_id)
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_provider_ref: ContextVar[str] = ContextVar("provider_ref", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (vazio se nao definido)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    return _correlation_id.set(correlation_id or generate_correlation_id())


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Define o correlation_id durante o bloco; gera um se nao informado."""
    token = set_correlation_id(correlation_id)
    try:
        yield _correlation_id.get()
    finally:
        reset_correlation_id(token)


def get_provider_ref() -> str:
    return _provider_ref.get()


@contextmanager
def provider_scope(provider_ref: str) -> Iterator[None]:
    """Marca os logs do bloco com o prestador em operacao."""
    token = _provider_ref.set(provider_ref)
    try:
        yield
    finally:
        _provider_ref.reset(token)
