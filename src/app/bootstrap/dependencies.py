"""Factories do core de agendamentos — criação de implementações concretas.

Centraliza a escolha de backend (memória ou Redis) a partir das settings
e o wiring dos serviços do ciclo de vida sobre os protocolos.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from app.bootstrap.clients import create_redis_client
from app.infra.stores import (
    MemoryJobScheduler,
    MemoryProviderLock,
    RedisJobScheduler,
    RedisProviderLock,
)
from app.services import (
    ConflictDetector,
    TimeWindowCalculator,
    TransitionReconciler,
    ValidationGate,
)
from app.use_cases.appointments import AppointmentLifecycle, SideEffectDispatcher
from config.settings import get_base_settings, get_booking_settings

if TYPE_CHECKING:
    from app.protocols import (
        AdministratorDirectoryProtocol,
        AppointmentStoreProtocol,
        CoverageResolverProtocol,
        JobSchedulerProtocol,
        LocationDirectoryProtocol,
        NotificationServiceProtocol,
        PaymentStoreProtocol,
        ProviderDirectoryProtocol,
        ProviderLockProtocol,
        ServiceOptionCatalogProtocol,
        TravelEstimatorProtocol,
    )
    from config.settings import BookingSettings

logger = logging.getLogger(__name__)


def _warn_memory_in_non_dev(component: str) -> None:
    base = get_base_settings()
    if base.requires_shared_state:
        logger.warning(
            "memory_backend_in_non_dev",
            extra={"component": component, "backend": "memory", "environment": base.environment},
        )


# ──────────────────────────────────────────────────────────────────────────────
# Infra Factories
# ──────────────────────────────────────────────────────────────────────────────


def create_provider_lock(settings: BookingSettings | None = None) -> ProviderLockProtocol:
    """Cria lock por prestador conforme PROVIDER_LOCK_BACKEND.

    - "memory": MemoryProviderLock (processo unico)
    - "redis": RedisProviderLock (varias instancias)
    """
    settings = settings or get_booking_settings()

    if settings.lock_backend == "redis":
        lock = RedisProviderLock(
            create_redis_client(),
            timeout_seconds=settings.lock_timeout_seconds,
            blocking_timeout_seconds=settings.lock_blocking_timeout_seconds,
        )
        logger.info("provider_lock_created", extra={"backend": "redis"})
        return lock

    _warn_memory_in_non_dev("provider_lock")
    logger.info("provider_lock_created", extra={"backend": "memory"})
    return MemoryProviderLock(settings.lock_blocking_timeout_seconds)


def create_job_scheduler(settings: BookingSettings | None = None) -> JobSchedulerProtocol:
    """Cria registro de jobs conforme JOB_SCHEDULER_BACKEND.

    - "memory": MemoryJobScheduler (processo unico, sem worker externo)
    - "redis": RedisJobScheduler (compartilhado com o worker de cobranca)
    """
    settings = settings or get_booking_settings()

    if settings.job_scheduler_backend == "redis":
        scheduler = RedisJobScheduler(create_redis_client())
        logger.info("job_scheduler_created", extra={"backend": "redis"})
        return scheduler

    _warn_memory_in_non_dev("job_scheduler")
    logger.info("job_scheduler_created", extra={"backend": "memory"})
    return MemoryJobScheduler()


# ──────────────────────────────────────────────────────────────────────────────
# Use Case Factories
# ──────────────────────────────────────────────────────────────────────────────


def create_appointment_lifecycle(
    *,
    store: AppointmentStoreProtocol,
    payment_store: PaymentStoreProtocol,
    job_scheduler: JobSchedulerProtocol,
    provider_directory: ProviderDirectoryProtocol,
    travel_estimator: TravelEstimatorProtocol,
    coverage_resolver: CoverageResolverProtocol,
    service_options: ServiceOptionCatalogProtocol,
    locations: LocationDirectoryProtocol,
    administrators: AdministratorDirectoryProtocol,
    provider_lock: ProviderLockProtocol | None = None,
    settings: BookingSettings | None = None,
    clock: Callable[[], datetime] | None = None,
    id_factory: Callable[[], str] | None = None,
) -> AppointmentLifecycle:
    """Monta o ciclo de vida com os colaboradores externos informados.

    clock e id_factory sobrescrevem o relogio UTC e os ids uuid (testes).
    """
    timing: dict[str, Any] = {"clock": clock} if clock is not None else {}
    ids: dict[str, Any] = {"id_factory": id_factory} if id_factory is not None else {}
    settings = settings or get_booking_settings()
    conflict_detector = ConflictDetector(store)

    return AppointmentLifecycle(
        store=store,
        provider_lock=provider_lock or create_provider_lock(settings),
        gate=ValidationGate(
            service_options=service_options,
            conflict_detector=conflict_detector,
        ),
        calculator=TimeWindowCalculator(
            provider_directory=provider_directory,
            travel_estimator=travel_estimator,
            service_options=service_options,
            locations=locations,
            zone=settings.zone,
        ),
        reconciler=TransitionReconciler(
            job_scheduler=job_scheduler,
            payment_store=payment_store,
            administrators=administrators,
            reschedule_charge_delay=timedelta(minutes=settings.reschedule_charge_delay_min),
            charge_job_prefix=settings.charge_job_prefix,
            **timing,
        ),
        coverage_resolver=coverage_resolver,
        provider_directory=provider_directory,
        zone=settings.zone,
        **timing,
        **ids,
    )


def create_side_effect_dispatcher(
    *,
    job_scheduler: JobSchedulerProtocol,
    payment_store: PaymentStoreProtocol,
    notification_service: NotificationServiceProtocol,
    clock: Callable[[], datetime] | None = None,
) -> SideEffectDispatcher:
    """Monta o dispatcher de efeitos colaterais pos-commit."""
    timing: dict[str, Any] = {"clock": clock} if clock is not None else {}
    return SideEffectDispatcher(
        job_scheduler=job_scheduler,
        payment_store=payment_store,
        notification_service=notification_service,
        **timing,
    )
