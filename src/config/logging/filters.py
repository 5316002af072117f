"""Filter de logging para injecao de contexto.

Campos injetados em todo record:
- correlation_id: operacao do ciclo de vida em andamento
- provider_ref: prestador cujo agenda esta sob lock (vazio fora do lock)
- service: Nome do servico
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


def _empty() -> str:
    return ""


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id, provider_ref e service em cada record de log.

    Args:
        service_name: Nome do servico.
        correlation_id_getter: Retorna o correlation_id atual.
        provider_ref_getter: Retorna o prestador da operacao atual.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
        provider_ref_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or _empty
        self._get_provider_ref = provider_ref_getter or _empty

    def filter(self, record: logging.LogRecord) -> bool:
        """Enriquece o record; nunca descarta.

        Valores passados via `extra` tem precedencia sobre o contexto.
        """
        if not getattr(record, "correlation_id", None):
            record.correlation_id = self._get_correlation_id()
        if not getattr(record, "provider_ref", None):
            record.provider_ref = self._get_provider_ref()
        record.service = self._service_name
        return True
