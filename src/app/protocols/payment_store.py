"""Contrato do store de registros de pagamento."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.appointment import PaymentRecord, PaymentStatus


class PaymentStoreProtocol(ABC):
    """Registros de pagamento, 1:1 com agendamentos."""

    @abstractmethod
    def find(self, appointment_id: str) -> PaymentRecord | None:
        """Busca o registro do agendamento."""

    @abstractmethod
    def update(self, record: PaymentRecord, status: PaymentStatus) -> PaymentRecord:
        """Atualiza o status e retorna o registro atualizado."""

    @abstractmethod
    def destroy(self, record: PaymentRecord) -> None:
        """Remove o registro."""
