"""Contratos de notificacao e de diretorio de administradores."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.domain.appointment import Appointment
    from app.domain.side_effects import NotificationVariant


@runtime_checkable
class NotificationServiceProtocol(Protocol):
    """Envio fire-and-forget; conteudo e entrega ficam fora do core."""

    def notify(
        self,
        variant: NotificationVariant,
        appointment: Appointment,
        recipient: str,
        index: int | None = None,
    ) -> None:
        ...


@runtime_checkable
class AdministratorDirectoryProtocol(Protocol):
    """Lista ordenada de administradores (ordem define a numeracao das copias)."""

    def list_administrators(self) -> list[str]: ...
