"""Ciclo de vida de agendamentos (raiz do agregado).

Fluxos:
- create: estrutura -> lock(prestador) -> janela -> overlap -> insert ->
  cobertura movel -> avisos de nova reserva
- update: lock(prestador) -> releitura -> mudancas + transicao de status ->
  janela (se campos relevantes mudaram) -> estrutura -> overlap -> save ->
  reconciliacao
- delete: service-booking e imutavel; demais categorias sao removidas

O check de overlap e o commit acontecem sob o mesmo lock por prestador.
Nenhuma operacao executa IO de billing/notificacao: os comandos voltam em
LifecycleResult.side_effects para o SideEffectDispatcher.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from app.domain.appointment import (
    Appointment,
    AppointmentCategory,
    BookingRequest,
)
from app.domain.errors import ImmutableError, NotFoundError, ValidationError
from app.observability import get_correlation_id, provider_scope, record_latency
from app.services.mobile_coverage import COVERAGE_FIELDS, resolve_mobile_coverage
from app.services.time_window import TIME_FIELDS, WINDOW_FIELDS, as_aware
from app.services.validation_gate import parse_category, parse_status

if TYPE_CHECKING:
    from app.domain.side_effects import SideEffect
    from app.protocols.appointment_store import (
        AppointmentStoreProtocol,
        ProviderLockProtocol,
    )
    from app.protocols.provider_directory import ProviderDirectoryProtocol
    from app.protocols.travel import CoverageResolverProtocol
    from app.services.time_window import TimeWindowCalculator
    from app.services.transition_reconciler import TransitionReconciler
    from app.services.validation_gate import ValidationGate
    from fsm.types.transition import StatusTransition

logger = logging.getLogger(__name__)

COMPONENT = "appointment_lifecycle"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return uuid.uuid4().hex


def _as_validation_error(exc: PydanticValidationError) -> ValidationError:
    """Converte o primeiro erro do pydantic no erro de dominio."""
    errors = exc.errors()
    if not errors:
        return ValidationError("appointment", str(exc))
    first = errors[0]
    loc = first.get("loc") or ("appointment",)
    return ValidationError(str(loc[0]), first.get("msg", "invalid value"), first.get("input"))


@dataclass(frozen=True, slots=True)
class LifecycleResult:
    """Agendamento resultante + comandos a executar depois do commit."""

    appointment: Appointment
    side_effects: tuple[SideEffect, ...] = ()
    transition: StatusTransition | None = None
    correlation_id: str = field(default_factory=get_correlation_id)


class AppointmentLifecycle:
    """Orquestra validacao, janela, overlap, persistencia e reconciliacao."""

    def __init__(
        self,
        *,
        store: AppointmentStoreProtocol,
        provider_lock: ProviderLockProtocol,
        gate: ValidationGate,
        calculator: TimeWindowCalculator,
        reconciler: TransitionReconciler,
        coverage_resolver: CoverageResolverProtocol,
        provider_directory: ProviderDirectoryProtocol,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
        zone: tzinfo = UTC,
    ) -> None:
        """zone: timezone aplicado a horarios naive recebidos nas escritas."""
        self._store = store
        self._lock = provider_lock
        self._gate = gate
        self._calculator = calculator
        self._reconciler = reconciler
        self._coverage = coverage_resolver
        self._providers = provider_directory
        self._clock = clock
        self._id_factory = id_factory
        self._zone = zone

    # ──────────────────────────────────────────────────────────────
    # API publica
    # ──────────────────────────────────────────────────────────────

    def create(self, request: BookingRequest | Mapping[str, Any]) -> LifecycleResult:
        """Cria agendamento.

        Raises:
            ValidationError: campo obrigatorio ausente ou enum invalido.
            ConflictError: overlap com outro agendamento ativo do prestador.
        """
        started = time.perf_counter()
        try:
            appointment = self._build(request)
            self._gate.check_structure(appointment)

            with self._hold(appointment.provider_ref or ""):
                appointment = self._calculator.apply(appointment)
                self._gate.check_availability(appointment)
                saved = self._store.insert(appointment)
                saved = self._attach_coverage(saved)

            logger.info(
                "appointment_created",
                extra={
                    "appointment_id": saved.id,
                    "category": saved.category.value,
                    "status": saved.status.value,
                    "provider_ref": saved.provider_ref,
                },
            )
            effects = self._reconciler.on_create(saved)
            return LifecycleResult(appointment=saved, side_effects=tuple(effects))
        finally:
            record_latency(COMPONENT, "create", (time.perf_counter() - started) * 1000)

    def update(self, appointment_id: str, changes: Mapping[str, Any]) -> LifecycleResult:
        """Aplica mudancas a um agendamento existente.

        Raises:
            NotFoundError: agendamento inexistente.
            ValidationError: mudanca proibida, transicao invalida ou campo ausente.
            ConflictError: novo intervalo colide com outro agendamento ativo.
        """
        started = time.perf_counter()
        try:
            existing = self._get(appointment_id)
            provider_ref = changes.get("provider_ref") or existing.provider_ref or ""

            with self._hold(provider_ref):
                # Releitura sob o lock: outra escrita pode ter commitado antes
                previous = self._get(appointment_id)
                normalized = self._gate.check_changes(previous, changes)
                transition = None
                if "status" in normalized:
                    transition = self._gate.check_transition(previous, normalized["status"])

                updated = self._merge(previous, normalized)
                if WINDOW_FIELDS.intersection(normalized):
                    updated = self._calculator.apply(updated)
                self._gate.check_structure(updated)
                self._gate.check_availability(updated)
                saved = self._store.save(updated)
                if COVERAGE_FIELDS.intersection(normalized):
                    saved = self._attach_coverage(saved)

            if transition is not None:
                logger.info("appointment_status_changed", extra=transition.to_log_dict())
            logger.info(
                "appointment_updated",
                extra={
                    "appointment_id": saved.id,
                    "changed_fields": sorted(normalized),
                    "status": saved.status.value,
                },
            )
            effects = self._reconciler.on_update(previous, saved)
            return LifecycleResult(
                appointment=saved,
                side_effects=tuple(effects),
                transition=transition,
            )
        finally:
            record_latency(COMPONENT, "update", (time.perf_counter() - started) * 1000)

    def delete(self, appointment_id: str) -> LifecycleResult:
        """Remove agendamento que nao seja service-booking.

        Raises:
            NotFoundError: agendamento inexistente.
            ImmutableError: categoria service-booking.
        """
        started = time.perf_counter()
        try:
            appointment = self._get(appointment_id)
            if appointment.category == AppointmentCategory.SERVICE_BOOKING:
                logger.info(
                    "appointment_delete_rejected",
                    extra={"appointment_id": appointment.id, "category": appointment.category.value},
                )
                raise ImmutableError("A 'Service Booking' appointment cannot be deleted")

            effects = self._reconciler.on_delete(appointment)
            if not self._store.delete(appointment.id):
                raise NotFoundError(appointment.id)

            logger.info(
                "appointment_deleted",
                extra={"appointment_id": appointment.id, "category": appointment.category.value},
            )
            return LifecycleResult(appointment=appointment, side_effects=tuple(effects))
        finally:
            record_latency(COMPONENT, "delete", (time.perf_counter() - started) * 1000)

    def purge_sync(self, provider_ref: str, sync_tag: str) -> list[str]:
        """Remove agendamentos external-sync do prestador com a sync_tag.

        Usado ao re-sincronizar um calendario externo.

        Returns:
            Ids removidos.
        """
        started = time.perf_counter()
        removed: list[str] = []
        try:
            with self._hold(provider_ref):
                for appointment in self._store.list_sync_tagged(provider_ref, sync_tag):
                    if self._store.delete(appointment.id):
                        removed.append(appointment.id)
            logger.info(
                "sync_appointments_purged",
                extra={
                    "provider_ref": provider_ref,
                    "sync_tag": sync_tag,
                    "removed_count": len(removed),
                },
            )
            return removed
        finally:
            record_latency(COMPONENT, "purge_sync", (time.perf_counter() - started) * 1000)

    # ──────────────────────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────────────────────

    @contextmanager
    def _hold(self, provider_ref: str) -> Iterator[None]:
        """Lock do prestador, com provider_ref no contexto de log."""
        with provider_scope(provider_ref), self._lock.hold(provider_ref):
            yield

    def _get(self, appointment_id: str) -> Appointment:
        appointment = self._store.get(appointment_id)
        if appointment is None:
            raise NotFoundError(appointment_id)
        return appointment

    def _build(self, request: BookingRequest | Mapping[str, Any]) -> Appointment:
        if not isinstance(request, BookingRequest):
            try:
                request = BookingRequest.model_validate(dict(request))
            except PydanticValidationError as exc:
                raise _as_validation_error(exc) from exc

        category = parse_category(request.category)
        status = parse_status(request.status)
        data = request.model_dump(exclude={"category", "status"})
        if category != AppointmentCategory.SERVICE_BOOKING:
            # Sem deslocamento: o intervalo de servico vem do requested
            data["service_start"] = None

        now = self._clock()
        return self._localize(
            Appointment(
                id=self._id_factory(),
                category=category,
                status=status,
                created_at=now,
                updated_at=now,
                **data,
            )
        )

    def _merge(self, current: Appointment, changes: Mapping[str, Any]) -> Appointment:
        try:
            merged = Appointment.model_validate(
                {**current.model_dump(), **changes, "updated_at": self._clock()}
            )
        except PydanticValidationError as exc:
            raise _as_validation_error(exc) from exc
        return self._localize(merged)

    def _localize(self, appointment: Appointment) -> Appointment:
        """Horarios naive passam a carregar o timezone configurado."""
        naive = {
            name: as_aware(value, self._zone)
            for name in TIME_FIELDS
            if (value := getattr(appointment, name)) is not None and value.tzinfo is None
        }
        return appointment.model_copy(update=naive) if naive else appointment

    def _attach_coverage(self, appointment: Appointment) -> Appointment:
        """Resolve a zona de cobertura; falhas nao desfazem a escrita."""
        try:
            zone = resolve_mobile_coverage(appointment, self._coverage, self._providers)
        except Exception:
            logger.exception(
                "mobile_coverage_failed",
                extra={"appointment_id": appointment.id, "provider_ref": appointment.provider_ref},
            )
            return appointment

        zone_ref = zone.ref if zone is not None else None
        if zone_ref == appointment.mobile_coverage_ref:
            return appointment
        return self._store.save(appointment.model_copy(update={"mobile_coverage_ref": zone_ref}))


__all__ = ["AppointmentLifecycle", "LifecycleResult"]
