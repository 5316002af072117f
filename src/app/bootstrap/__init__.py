"""Bootstrap da aplicação — inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
expõe singletons de infraestrutura (lock por prestador, registro de jobs).

Uso:
    from app.bootstrap import initialize_app, get_provider_lock

    # Na inicialização do serviço
    initialize_app()

    lock = get_provider_lock()
"""

from __future__ import annotations

import logging
from functools import lru_cache

from app.observability import get_correlation_id, get_provider_ref
from config.logging import configure_logging
from config.settings import get_base_settings, get_booking_settings

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa a aplicação com todas as configurações necessárias.

    Deve ser chamada uma vez no início do serviço.
    """
    configure_logging(
        level=get_booking_settings().log_level,
        service_name=get_base_settings().service_name,
        correlation_id_getter=get_correlation_id,
        provider_ref_getter=get_provider_ref,
    )
    validate_runtime_settings()


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Fora de `development` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.
    """
    base = get_base_settings()
    environment = base.environment
    strict_mode = base.requires_shared_state
    errors = [f"base: {error}" for error in base.validate()]

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")


# ──────────────────────────────────────────────────────────────────────────────
# Getters (lazy initialization com cache)
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_provider_lock():
    """Obtém lock por prestador (singleton).

    Returns:
        ProviderLockProtocol configurado conforme env
    """
    from app.bootstrap.dependencies import create_provider_lock
    return create_provider_lock()


@lru_cache(maxsize=1)
def get_job_scheduler():
    """Obtém registro de jobs de cobrança (singleton).

    Returns:
        JobSchedulerProtocol configurado conforme env
    """
    from app.bootstrap.dependencies import create_job_scheduler
    return create_job_scheduler()
