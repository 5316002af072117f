"""Testes do TransitionReconciler (billing, pagamento, notificacao)."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from app.domain.appointment import AppointmentStatus, PaymentStatus
from app.domain.side_effects import (
    CancelChargeJob,
    DestroyPaymentRecord,
    NotificationVariant,
    RecipientRole,
    ScheduleChargeJob,
    SendNotification,
    UpdatePaymentRecord,
)
from app.infra.stores.memory_stores import MemoryJobScheduler, MemoryPaymentStore
from app.services.transition_reconciler import TransitionReconciler
from tests.fakes.booking_collaborators import (
    PROVIDER,
    USER,
    FakeAdministratorDirectory,
    at,
    make_busy_block,
    make_service_booking,
)

NOW = at(8)
JOB = "Charge-Appointment-ap-1"


@pytest.fixture
def jobs() -> MemoryJobScheduler:
    scheduler = MemoryJobScheduler()
    scheduler.schedule(JOB, at(10), {"appointment_id": "ap-1"})  # 2h a frente
    return scheduler


@pytest.fixture
def payments() -> MemoryPaymentStore:
    return MemoryPaymentStore()


@pytest.fixture
def reconciler(jobs: MemoryJobScheduler, payments: MemoryPaymentStore) -> TransitionReconciler:
    return TransitionReconciler(
        job_scheduler=jobs,
        payment_store=payments,
        administrators=FakeAdministratorDirectory(["admin-a", "admin-b"]),
        clock=lambda: NOW,
    )


def _of_type(effects, kind):
    return [effect for effect in effects if isinstance(effect, kind)]


def _moved(**overrides):
    """Agendamento reagendado para o dia seguinte."""
    data = {
        "status": AppointmentStatus.RESCHEDULED,
        "requested_start": at(10, day=16),
        "service_start": at(10, day=16),
        "service_end": at(11, day=16),
        "busy_start": at(9, 30, day=16),
        "busy_end": at(11, 15, day=16),
    }
    data.update(overrides)
    return make_service_booking(**data)


class TestChargeJobReconciliation:
    """Job de cobranca diferida (somente service-booking)."""

    def test_reschedule_replaces_job_ten_minutes_from_now(self, reconciler: TransitionReconciler) -> None:
        effects = reconciler.plan_charge_job(make_service_booking(), _moved())

        assert effects == [
            CancelChargeJob(job_name=JOB, appointment_id="ap-1"),
            ScheduleChargeJob(
                job_name=JOB,
                run_at=NOW + timedelta(minutes=10),
                appointment_id="ap-1",
                replaces=JOB,
            ),
        ]

    def test_reschedule_after_job_ran_leaves_it_untouched(self, jobs: MemoryJobScheduler, reconciler: TransitionReconciler) -> None:
        jobs.schedule(JOB, at(7), {})
        assert reconciler.plan_charge_job(make_service_booking(), _moved()) == []

    def test_job_due_exactly_now_is_untouched(self, jobs: MemoryJobScheduler, reconciler: TransitionReconciler) -> None:
        jobs.schedule(JOB, NOW, {})
        assert reconciler.plan_charge_job(make_service_booking(), _moved()) == []

    def test_cancel_of_confirmed_booking_only_cancels_job(self, reconciler: TransitionReconciler) -> None:
        previous = make_service_booking(status=AppointmentStatus.CONFIRMED, confirmed=True)
        current = make_service_booking(status=AppointmentStatus.CANCELLED, confirmed=True)

        effects = reconciler.plan_charge_job(previous, current)

        assert effects == [CancelChargeJob(job_name=JOB, appointment_id="ap-1")]

    def test_missing_job_is_noop(self, jobs: MemoryJobScheduler, reconciler: TransitionReconciler) -> None:
        jobs.cancel(JOB)
        current = make_service_booking(status=AppointmentStatus.CANCELLED)
        assert reconciler.plan_charge_job(make_service_booking(), current) == []

    def test_rescheduled_status_without_time_change_is_noop(self, reconciler: TransitionReconciler) -> None:
        current = make_service_booking(status=AppointmentStatus.RESCHEDULED)
        assert reconciler.plan_charge_job(make_service_booking(), current) == []

    def test_rescheduled_moved_again_replaces_job(self, reconciler: TransitionReconciler) -> None:
        previous = _moved()
        current = _moved(service_start=at(14, day=16), busy_start=at(13, 30, day=16))
        effects = reconciler.plan_charge_job(previous, current)
        assert len(_of_type(effects, ScheduleChargeJob)) == 1

    def test_busy_block_has_no_charge_job(self, reconciler: TransitionReconciler) -> None:
        current = make_busy_block(id="ap-1", status=AppointmentStatus.CANCELLED)
        assert reconciler.plan_charge_job(make_busy_block(id="ap-1"), current) == []

    def test_custom_prefix_and_delay(self, jobs: MemoryJobScheduler, payments: MemoryPaymentStore) -> None:
        jobs.schedule("Bill-ap-1", at(10), {})
        reconciler = TransitionReconciler(
            job_scheduler=jobs,
            payment_store=payments,
            administrators=FakeAdministratorDirectory(),
            reschedule_charge_delay=timedelta(minutes=3),
            charge_job_prefix="Bill-",
            clock=lambda: NOW,
        )
        effects = reconciler.plan_charge_job(make_service_booking(), _moved())
        assert effects[-1] == ScheduleChargeJob(
            job_name="Bill-ap-1",
            run_at=NOW + timedelta(minutes=3),
            appointment_id="ap-1",
            replaces="Bill-ap-1",
        )


class TestPaymentReconciliation:
    def test_cancel_destroys_pending_record(self, payments: MemoryPaymentStore, reconciler: TransitionReconciler) -> None:
        payments.add("ap-1", PaymentStatus.PENDING_CHARGE)
        current = make_service_booking(status=AppointmentStatus.CANCELLED)

        effects = reconciler.plan_payment(make_service_booking(), current)

        assert effects == [DestroyPaymentRecord(appointment_id="ap-1", only_if=PaymentStatus.PENDING_CHARGE)]

    def test_cancel_preserves_paid_record(self, payments: MemoryPaymentStore, reconciler: TransitionReconciler) -> None:
        payments.add("ap-1", PaymentStatus.PAID)
        current = make_service_booking(status=AppointmentStatus.CANCELLED)
        assert reconciler.plan_payment(make_service_booking(), current) == []

    def test_paid_status_is_mirrored(self, payments: MemoryPaymentStore, reconciler: TransitionReconciler) -> None:
        payments.add("ap-1", PaymentStatus.PENDING_CHARGE)
        current = make_service_booking(payment_status=PaymentStatus.PAID)

        effects = reconciler.plan_payment(make_service_booking(), current)

        assert effects == [UpdatePaymentRecord(appointment_id="ap-1", status=PaymentStatus.PAID)]

    def test_paid_and_cancelled_in_same_write_keeps_record(self, payments: MemoryPaymentStore, reconciler: TransitionReconciler) -> None:
        payments.add("ap-1", PaymentStatus.PENDING_CHARGE)
        current = make_service_booking(status=AppointmentStatus.CANCELLED, payment_status=PaymentStatus.PAID)

        effects = reconciler.plan_payment(make_service_booking(), current)

        assert effects == [UpdatePaymentRecord(appointment_id="ap-1", status=PaymentStatus.PAID)]

    def test_no_record_is_noop(self, reconciler: TransitionReconciler) -> None:
        current = make_service_booking(status=AppointmentStatus.CANCELLED)
        assert reconciler.plan_payment(make_service_booking(), current) == []


class TestNotificationSelection:
    """Uma variante por (status x confirmed)."""

    @pytest.mark.parametrize(
        ("status", "confirmed", "variant"),
        [
            (AppointmentStatus.RESCHEDULED, False, NotificationVariant.APPOINTMENT_RESCHEDULED),
            (AppointmentStatus.RESCHEDULED, True, NotificationVariant.CONFIRMED_APPOINTMENT_RESCHEDULED),
            (AppointmentStatus.CANCELLED, False, NotificationVariant.APPOINTMENT_CANCELLED),
            (AppointmentStatus.CANCELLED, True, NotificationVariant.CONFIRMED_APPOINTMENT_CANCELLED),
        ],
    )
    def test_variant_matrix(
        self,
        reconciler: TransitionReconciler,
        status: AppointmentStatus,
        confirmed: bool,
        variant: NotificationVariant,
    ) -> None:
        previous = make_service_booking(confirmed=confirmed)
        current = make_service_booking(status=status, confirmed=confirmed)

        effects = reconciler.plan_notifications(previous, current)

        assert {effect.variant for effect in effects} == {variant}

    def test_user_and_numbered_administrators(self, reconciler: TransitionReconciler) -> None:
        current = make_service_booking(status=AppointmentStatus.CANCELLED)
        effects = reconciler.plan_notifications(make_service_booking(), current)

        assert [(e.recipient, e.role, e.index) for e in effects] == [
            (USER, RecipientRole.USER, None),
            ("admin-a", RecipientRole.ADMINISTRATOR, 1),
            ("admin-b", RecipientRole.ADMINISTRATOR, 2),
        ]

    def test_confirmation_sends_nothing(self, reconciler: TransitionReconciler) -> None:
        current = make_service_booking(status=AppointmentStatus.CONFIRMED, confirmed=True)
        assert reconciler.plan_notifications(make_service_booking(), current) == []

    def test_unchanged_rescheduled_sends_nothing(self, reconciler: TransitionReconciler) -> None:
        assert reconciler.plan_notifications(_moved(), _moved(title="note")) == []

    def test_rescheduled_moved_again_notifies(self, reconciler: TransitionReconciler) -> None:
        current = _moved(service_start=at(14, day=16))
        effects = reconciler.plan_notifications(_moved(), current)
        assert effects[0].variant == NotificationVariant.APPOINTMENT_RESCHEDULED

    def test_busy_block_sends_nothing(self, reconciler: TransitionReconciler) -> None:
        current = make_busy_block(status=AppointmentStatus.CANCELLED)
        assert reconciler.plan_notifications(make_busy_block(), current) == []


class TestOnUpdate:
    def test_confirmed_cancel_scenario(self, jobs: MemoryJobScheduler, payments: MemoryPaymentStore, reconciler: TransitionReconciler) -> None:
        payments.add("ap-1")
        previous = make_service_booking(status=AppointmentStatus.CONFIRMED, confirmed=True)
        current = make_service_booking(status=AppointmentStatus.CANCELLED, confirmed=True)

        effects = reconciler.on_update(previous, current)

        assert _of_type(effects, CancelChargeJob) == [CancelChargeJob(job_name=JOB, appointment_id="ap-1")]
        assert _of_type(effects, ScheduleChargeJob) == []
        assert len(_of_type(effects, DestroyPaymentRecord)) == 1
        assert len(_of_type(effects, SendNotification)) == 3

    def test_update_while_terminal_only_mirrors_payment(self, payments: MemoryPaymentStore, reconciler: TransitionReconciler) -> None:
        payments.add("ap-1")
        previous = make_service_booking(status=AppointmentStatus.DONE)
        current = make_service_booking(status=AppointmentStatus.DONE, payment_status=PaymentStatus.PAID)

        effects = reconciler.on_update(previous, current)

        assert effects == [UpdatePaymentRecord(appointment_id="ap-1", status=PaymentStatus.PAID)]

    def test_flows_are_isolated(self, payments: MemoryPaymentStore) -> None:
        payments.add("ap-1")
        broken_jobs = MagicMock()
        broken_jobs.run_time_of.side_effect = ConnectionError("scheduler down")
        reconciler = TransitionReconciler(
            job_scheduler=broken_jobs,
            payment_store=payments,
            administrators=FakeAdministratorDirectory(error=RuntimeError("directory down")),
            clock=lambda: NOW,
        )
        current = make_service_booking(status=AppointmentStatus.CANCELLED)

        effects = reconciler.on_update(make_service_booking(), current)

        # Billing e notificacao falharam; pagamento seguiu
        assert effects == [DestroyPaymentRecord(appointment_id="ap-1", only_if=PaymentStatus.PENDING_CHARGE)]


class TestOnCreateAndDelete:
    def test_booking_confirmation_notices(self, reconciler: TransitionReconciler) -> None:
        effects = reconciler.on_create(make_service_booking())

        assert [(e.variant, e.recipient, e.index) for e in effects] == [
            (NotificationVariant.BOOKING_CONFIRMATION, USER, None),
            (NotificationVariant.ADMIN_NEW_BOOKING, "admin-a", 1),
            (NotificationVariant.ADMIN_NEW_BOOKING, "admin-b", 2),
            (NotificationVariant.PROVIDER_NEW_BOOKING, PROVIDER, None),
        ]

    def test_busy_block_create_is_silent(self, reconciler: TransitionReconciler) -> None:
        assert reconciler.on_create(make_busy_block()) == []

    def test_delete_destroys_existing_record(self, payments: MemoryPaymentStore, reconciler: TransitionReconciler) -> None:
        payments.add("bb-1", PaymentStatus.PAID)
        assert reconciler.on_delete(make_busy_block()) == [DestroyPaymentRecord(appointment_id="bb-1")]

    def test_delete_without_record(self, reconciler: TransitionReconciler) -> None:
        assert reconciler.on_delete(make_busy_block()) == []
