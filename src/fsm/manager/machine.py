"""
Maquina de status de um agendamento.

Valida transicoes contra o grafo e os guards e mantem historico
rastreavel para auditoria.
"""

from typing import Any

from fsm.rules.guards import GuardResult, evaluate_guards
from fsm.states.appointment import (
    DEFAULT_INITIAL_STATUS,
    AppointmentStatus,
    is_terminal,
)
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StatusTransition, TransitionResult


class AppointmentStatusMachine:
    """
    Maquina de status para um unico agendamento.

    Attributes:
        current_status: Status atual
        history: Transicoes realizadas
    """

    __slots__ = ("_appointment_id", "_current_status", "_history")

    def __init__(
        self,
        initial_status: AppointmentStatus | None = None,
        appointment_id: str = "",
    ) -> None:
        self._current_status = initial_status or DEFAULT_INITIAL_STATUS
        self._history: list[StatusTransition] = []
        self._appointment_id = appointment_id

    @property
    def current_status(self) -> AppointmentStatus:
        """Status atual da maquina."""
        return self._current_status

    @property
    def history(self) -> list[StatusTransition]:
        """Historico de transicoes (copia para evitar mutacao externa)."""
        return list(self._history)

    @property
    def appointment_id(self) -> str:
        return self._appointment_id

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self._current_status)

    def can_transition_to(self, target: AppointmentStatus) -> bool:
        """Verifica se pode transitar para o status alvo."""
        if not is_transition_valid(self._current_status, target):
            return False
        return evaluate_guards(self._current_status, target).allowed

    def get_valid_targets(self) -> frozenset[AppointmentStatus]:
        """Retorna status de destino validos a partir do atual."""
        return get_valid_targets(self._current_status)

    def transition(
        self,
        target: AppointmentStatus,
        trigger: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transicao de status.

        Guards sao avaliados antes do grafo para que status terminais e
        valores fora do enum tenham motivo especifico.

        Args:
            target: Status de destino
            trigger: Identificador do gatilho (ex: 'update')
            metadata: Dados adicionais para auditoria (nunca PII)

        Returns:
            TransitionResult com sucesso/falha e dados da transicao
        """
        guard_result: GuardResult = evaluate_guards(self._current_status, target)
        if not guard_result.allowed:
            return TransitionResult(
                success=False,
                error_reason=guard_result.reason,
            )

        if not is_transition_valid(self._current_status, target):
            return TransitionResult(
                success=False,
                error_reason=(
                    f"Appointment cannot go from {self._current_status.value} "
                    f"to {target.value}"
                ),
            )

        transition = StatusTransition(
            appointment_id=self._appointment_id,
            from_status=self._current_status,
            to_status=target,
            trigger=trigger,
            metadata=metadata or {},
        )

        self._current_status = target
        self._history.append(transition)

        return TransitionResult(success=True, transition=transition)

    def get_state_summary(self) -> dict[str, Any]:
        """Resumo do status atual para logs."""
        return {
            "appointment_id": self._appointment_id,
            "current_status": self._current_status.value,
            "is_terminal": self.is_terminal,
            "transition_count": len(self._history),
            "valid_targets": sorted(s.value for s in self.get_valid_targets()),
        }


def create_status_machine(
    appointment_id: str,
    initial_status: AppointmentStatus | None = None,
) -> AppointmentStatusMachine:
    """Factory da maquina de status de um agendamento."""
    return AppointmentStatusMachine(
        initial_status=initial_status,
        appointment_id=appointment_id,
    )
