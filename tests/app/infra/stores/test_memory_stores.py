"""Testes dos stores em memória."""

from __future__ import annotations

import pytest

from app.domain.appointment import (
    Appointment,
    AppointmentCategory,
    AppointmentStatus,
    PaymentStatus,
)
from app.domain.errors import ConflictError
from app.infra.stores.memory_stores import (
    MemoryAppointmentStore,
    MemoryJobScheduler,
    MemoryPaymentStore,
)
from tests.fakes.booking_collaborators import PROVIDER, at, make_busy_block


def _sync(appointment_id: str, sync_tag: str, hour: int) -> Appointment:
    return make_busy_block(
        id=appointment_id,
        category=AppointmentCategory.EXTERNAL_SYNC,
        sync_tag=sync_tag,
        requested_start=at(hour),
        requested_end=at(hour + 1),
        service_start=at(hour),
        service_end=at(hour + 1),
        busy_start=at(hour),
        busy_end=at(hour + 1),
    )


class TestMemoryAppointmentStore:
    """Testes do MemoryAppointmentStore."""

    def test_insert_and_get_returns_copy(self) -> None:
        """Alterar o objeto retornado nao altera o store."""
        store = MemoryAppointmentStore()
        store.insert(make_busy_block())

        loaded = store.get("bb-1")
        loaded.title = "changed"

        assert store.get("bb-1").title != "changed"

    def test_insert_duplicate_id_raises(self) -> None:
        store = MemoryAppointmentStore()
        store.insert(make_busy_block())
        with pytest.raises(ValueError, match="ja existe"):
            store.insert(make_busy_block())

    def test_save_missing_raises(self) -> None:
        with pytest.raises(KeyError):
            MemoryAppointmentStore().save(make_busy_block())

    def test_delete(self) -> None:
        store = MemoryAppointmentStore()
        store.insert(make_busy_block())

        assert store.delete("bb-1") is True
        assert store.delete("bb-1") is False
        assert store.get("bb-1") is None

    def test_find_active_overlapping_is_half_open(self) -> None:
        store = MemoryAppointmentStore()
        store.insert(make_busy_block())
        store.insert(make_busy_block(id="cancelled", status=AppointmentStatus.CANCELLED))

        assert store.find_active_overlapping(PROVIDER, at(11), at(12)) == []
        assert [a.id for a in store.find_active_overlapping(PROVIDER, at(10, 30), at(12))] == ["bb-1"]
        assert store.find_active_overlapping(PROVIDER, at(10), at(11), exclude_id="bb-1") == []
        assert store.find_active_overlapping("other-provider", at(10), at(11)) == []

    def test_exclusion_constraint_rejects_overlap(self) -> None:
        store = MemoryAppointmentStore(enforce_exclusion=True)
        store.insert(make_busy_block())

        with pytest.raises(ConflictError) as exc_info:
            store.insert(make_busy_block(id="bb-2", status=AppointmentStatus.CONFIRMED))

        assert exc_info.value.conflicting_ids == ("bb-1",)
        assert store.get("bb-2") is None

    def test_exclusion_constraint_ignores_inactive(self) -> None:
        store = MemoryAppointmentStore(enforce_exclusion=True)
        store.insert(make_busy_block())
        store.insert(make_busy_block(id="bb-2", status=AppointmentStatus.CANCELLED))

        assert store.get("bb-2") is not None

    def test_list_for_provider_sorted_and_filtered(self) -> None:
        store = MemoryAppointmentStore()
        store.insert(make_busy_block(id="late", busy_start=at(14), busy_end=at(15)))
        store.insert(make_busy_block(id="early"))
        store.insert(
            make_busy_block(
                id="gone",
                busy_start=at(12),
                busy_end=at(13),
                status=AppointmentStatus.CANCELLED,
            )
        )

        assert [a.id for a in store.list_for_provider(PROVIDER)] == ["early", "gone", "late"]
        assert [a.id for a in store.list_for_provider(PROVIDER, active_only=True)] == ["early", "late"]
        assert [a.id for a in store.list_for_provider(PROVIDER, start=at(12), end=at(16))] == ["gone", "late"]

    def test_list_sync_tagged(self) -> None:
        store = MemoryAppointmentStore()
        store.insert(_sync("s-old", "run-1", 8))
        store.insert(_sync("s-new", "run-2", 12))
        store.insert(make_busy_block(id="block", sync_tag="run-1"))

        assert [a.id for a in store.list_sync_tagged(PROVIDER, "run-1")] == ["s-old"]
        assert [a.id for a in store.list_sync_tagged(PROVIDER, "run-2", matching=False)] == ["s-old"]


class TestMemoryPaymentStore:
    def test_add_find_update_destroy(self) -> None:
        store = MemoryPaymentStore()
        record = store.add("ap-1")
        assert record.status == PaymentStatus.PENDING_CHARGE

        updated = store.update(record, PaymentStatus.PAID)
        assert store.find("ap-1") == updated

        store.destroy(updated)
        assert store.find("ap-1") is None

    def test_find_missing(self) -> None:
        assert MemoryPaymentStore().find("nope") is None


class TestMemoryJobScheduler:
    def test_schedule_replaces_and_cancel(self) -> None:
        scheduler = MemoryJobScheduler()
        scheduler.schedule("job-1", at(9), {"appointment_id": "ap-1"})
        scheduler.schedule("job-1", at(10), {"appointment_id": "ap-1"})

        assert scheduler.run_time_of("job-1") == at(10)
        assert scheduler.payload_of("job-1") == {"appointment_id": "ap-1"}
        assert scheduler.cancel("job-1") is True
        assert scheduler.cancel("job-1") is False
        assert scheduler.run_time_of("job-1") is None
        assert scheduler.payload_of("job-1") is None
