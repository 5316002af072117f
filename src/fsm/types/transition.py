"""
Tipos para representar transicoes de status.

Registros imutaveis usados para auditoria nos logs do ciclo de vida.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from fsm.states.appointment import AppointmentStatus


@dataclass(frozen=True, slots=True)
class StatusTransition:
    """
    Registro imutavel de uma mudanca de status.

    Attributes:
        appointment_id: Agendamento afetado
        from_status: Status de origem
        to_status: Status de destino
        trigger: Identificador do gatilho (ex: 'update', 'purge_sync')
        metadata: Dados adicionais para auditoria (nunca conter PII)
        timestamp: Momento da transicao (UTC)
    """

    appointment_id: str
    from_status: AppointmentStatus
    to_status: AppointmentStatus
    trigger: str
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(UTC)
    )

    def __post_init__(self) -> None:
        """Valida invariantes do objeto apos inicializacao."""
        if not self.trigger or not self.trigger.strip():
            raise ValueError("trigger nao pode ser vazio")

    def to_log_dict(self) -> dict[str, Any]:
        """Representacao segura para logs estruturados."""
        return {
            "appointment_id": self.appointment_id,
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "trigger": self.trigger,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """
    Resultado de uma tentativa de transicao.

    Attributes:
        success: Se a transicao foi aceita
        transition: Dados da transicao (se success=True)
        error_reason: Motivo da recusa (se success=False)
    """

    success: bool
    transition: StatusTransition | None = None
    error_reason: str | None = None

    def __post_init__(self) -> None:
        """Valida consistencia do resultado."""
        if self.success and self.transition is None:
            raise ValueError("Transicao bem-sucedida deve incluir transition")
        if not self.success and self.error_reason is None:
            raise ValueError("Transicao falha deve incluir error_reason")
