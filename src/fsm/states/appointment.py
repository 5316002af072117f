"""
Status canonicos de um agendamento.

Vocabulario fechado: qualquer valor fora deste enum e rejeitado pela
validacao antes de chegar ao store.

Estados ativos ocupam a agenda do prestador; estados terminais encerram
o ciclo de vida e nao disparam mais reconciliacao.
"""

from enum import StrEnum


class AppointmentStatus(StrEnum):
    """
    Status de um agendamento.

    Estados ativos (bloqueiam a agenda):
        - UNCONFIRMED: Reservado, aguardando confirmacao do prestador
        - CONFIRMED: Confirmado pelo prestador
        - RESCHEDULED: Movido para novo horario

    Estados terminais:
        - DONE: Servico realizado
        - CANCELLED: Cancelado
        - NO_SHOW: Cliente nao compareceu
    """

    UNCONFIRMED = "unconfirmed"
    CONFIRMED = "confirmed"
    DONE = "done"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        """Rotulo legivel para telas e notificacoes."""
        return STATUS_LABELS[self]


STATUS_LABELS: dict[AppointmentStatus, str] = {
    AppointmentStatus.UNCONFIRMED: "To Be Confirmed",
    AppointmentStatus.CONFIRMED: "Confirmed",
    AppointmentStatus.DONE: "Done",
    AppointmentStatus.RESCHEDULED: "Rescheduled",
    AppointmentStatus.CANCELLED: "Cancelled",
    AppointmentStatus.NO_SHOW: "No-Show",
}

# Status que ocupam a agenda do prestador (entram na checagem de overlap)
ACTIVE_STATUSES: frozenset[AppointmentStatus] = frozenset({
    AppointmentStatus.UNCONFIRMED,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.RESCHEDULED,
})

# Uma vez terminal, o agendamento nao transita para outro status
TERMINAL_STATUSES: frozenset[AppointmentStatus] = frozenset({
    AppointmentStatus.DONE,
    AppointmentStatus.CANCELLED,
    AppointmentStatus.NO_SHOW,
})

DEFAULT_INITIAL_STATUS: AppointmentStatus = AppointmentStatus.UNCONFIRMED


def is_terminal(status: AppointmentStatus) -> bool:
    """Retorna True se o status encerra o ciclo de vida."""
    return status in TERMINAL_STATUSES


def is_active(status: AppointmentStatus) -> bool:
    """Retorna True se o status ocupa a agenda do prestador."""
    return status in ACTIVE_STATUSES
