"""
Regras de transicao validas entre status de agendamento.

Define o grafo de transicoes: confirmar, reagendar, cancelar,
concluir e marcar no-show.
"""

from fsm.states.appointment import TERMINAL_STATUSES, AppointmentStatus

TransitionMap = dict[AppointmentStatus, frozenset[AppointmentStatus]]

# Chave: status de origem
# Valor: conjunto de status de destino permitidos
VALID_TRANSITIONS: TransitionMap = {
    AppointmentStatus.UNCONFIRMED: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.RESCHEDULED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    }),

    AppointmentStatus.CONFIRMED: frozenset({
        AppointmentStatus.DONE,
        AppointmentStatus.RESCHEDULED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    }),

    # RESCHEDULED: pode ser reconfirmado, movido de novo ou encerrado
    AppointmentStatus.RESCHEDULED: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.RESCHEDULED,
        AppointmentStatus.DONE,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    }),

    AppointmentStatus.DONE: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}


def get_valid_targets(status: AppointmentStatus) -> frozenset[AppointmentStatus]:
    """Retorna os status de destino validos (vazio se terminal)."""
    return VALID_TRANSITIONS.get(status, frozenset())


def is_transition_valid(
    from_status: AppointmentStatus,
    to_status: AppointmentStatus,
) -> bool:
    """
    Verifica se uma transicao e permitida pelo grafo.

    Args:
        from_status: Status de origem
        to_status: Status de destino

    Returns:
        True se a transicao e permitida, False caso contrario
    """
    if from_status in TERMINAL_STATUSES:
        return False
    return to_status in get_valid_targets(from_status)


def validate_transition_map() -> list[str]:
    """
    Valida a integridade do mapa de transicoes.

    Returns:
        Lista de erros encontrados (vazia se valido)
    """
    errors: list[str] = []

    for status in AppointmentStatus:
        if status not in VALID_TRANSITIONS:
            errors.append(f"Status {status.name} ausente em VALID_TRANSITIONS")

    for status in TERMINAL_STATUSES:
        targets = VALID_TRANSITIONS.get(status, frozenset())
        if targets:
            errors.append(
                f"Status terminal {status.name} nao deveria ter transicoes: {targets}"
            )

    for from_status, targets in VALID_TRANSITIONS.items():
        for target in targets:
            if not isinstance(target, AppointmentStatus):
                errors.append(
                    f"Transicao {from_status.name} -> {target}: destino invalido"
                )

    return errors
