"""
Guards para transicoes de status de agendamento.

Guards sao regras avaliadas antes do grafo de transicoes;
o primeiro guard que negar bloqueia a transicao.
"""

from collections.abc import Callable

from fsm.states.appointment import TERMINAL_STATUSES, AppointmentStatus


class GuardResult:
    """
    Resultado da avaliacao de um guard.

    Attributes:
        allowed: Se a transicao e permitida
        reason: Motivo do bloqueio (se allowed=False)
    """

    __slots__ = ("allowed", "reason")

    def __init__(self, allowed: bool, reason: str | None = None) -> None:
        self.allowed = allowed
        self.reason = reason

    @classmethod
    def allow(cls) -> "GuardResult":
        """Cria resultado permitindo a transicao."""
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "GuardResult":
        """Cria resultado negando a transicao."""
        return cls(allowed=False, reason=reason)


Guard = Callable[[AppointmentStatus, AppointmentStatus], GuardResult]


def guard_valid_status(
    from_status: AppointmentStatus,
    to_status: AppointmentStatus,
) -> GuardResult:
    """Guard: ambos os status precisam ser membros do enum."""
    if not isinstance(from_status, AppointmentStatus):
        return GuardResult.deny(f"{from_status} is not a valid status")

    if not isinstance(to_status, AppointmentStatus):
        return GuardResult.deny(f"{to_status} is not a valid status")

    return GuardResult.allow()


def guard_terminal_status(
    from_status: AppointmentStatus,
    to_status: AppointmentStatus,
) -> GuardResult:
    """Guard: status terminais nao permitem saida."""
    if from_status in TERMINAL_STATUSES:
        return GuardResult.deny(
            f"Appointment is already {from_status.value} and cannot become {to_status}"
        )
    return GuardResult.allow()


def guard_same_status(
    from_status: AppointmentStatus,
    to_status: AppointmentStatus,
) -> GuardResult:
    """
    Guard: previne transicao reflexiva.

    Excecao: RESCHEDULED -> RESCHEDULED (agendamento movido de novo).
    """
    if from_status == AppointmentStatus.RESCHEDULED:
        return GuardResult.allow()

    if from_status == to_status:
        return GuardResult.deny(
            f"Transicao reflexiva nao permitida: {from_status.name} -> {to_status.name}"
        )

    return GuardResult.allow()


# Ordem importa: o primeiro guard que negar define o motivo
DEFAULT_GUARDS: list[Guard] = [
    guard_valid_status,
    guard_terminal_status,
    guard_same_status,
]


def evaluate_guards(
    from_status: AppointmentStatus,
    to_status: AppointmentStatus,
    guards: list[Guard] | None = None,
) -> GuardResult:
    """
    Avalia todos os guards para uma transicao.

    Args:
        from_status: Status de origem
        to_status: Status de destino
        guards: Lista de guards a aplicar (usa DEFAULT_GUARDS se None)

    Returns:
        GuardResult do primeiro guard que negar, ou allow() se todos passarem
    """
    guards_to_apply = guards if guards is not None else DEFAULT_GUARDS

    for guard in guards_to_apply:
        result = guard(from_status, to_status)
        if not result.allowed:
            return result

    return GuardResult.allow()
