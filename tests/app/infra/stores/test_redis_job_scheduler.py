"""Testes do RedisJobScheduler com mock."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from redis.exceptions import TimeoutError as RedisTimeoutError

from app.infra.stores.redis_job_scheduler import RedisJobScheduler
from utils.errors import RedisConnectionError

RUN_AT = datetime(2026, 1, 15, 8, 10, tzinfo=UTC)


class TestRedisJobScheduler:
    """Testes do RedisJobScheduler."""

    def test_schedule_writes_hash(self) -> None:
        """Deve gravar run_at ISO e payload JSON sob o prefixo job:."""
        mock_redis = MagicMock()
        scheduler = RedisJobScheduler(mock_redis)

        scheduler.schedule("Charge-Appointment-ap-1", RUN_AT, {"appointment_id": "ap-1"})

        mock_redis.hset.assert_called_once_with(
            "job:Charge-Appointment-ap-1",
            mapping={
                "run_at": RUN_AT.isoformat(),
                "payload": json.dumps({"appointment_id": "ap-1"}),
            },
        )

    def test_cancel_returns_whether_job_existed(self) -> None:
        mock_redis = MagicMock()
        mock_redis.delete.side_effect = [1, 0]
        scheduler = RedisJobScheduler(mock_redis)

        assert scheduler.cancel("job-1") is True
        assert scheduler.cancel("job-1") is False
        mock_redis.delete.assert_called_with("job:job-1")

    def test_run_time_of_decodes_bytes(self) -> None:
        mock_redis = MagicMock()
        mock_redis.hget.return_value = RUN_AT.isoformat().encode("utf-8")
        scheduler = RedisJobScheduler(mock_redis)

        assert scheduler.run_time_of("job-1") == RUN_AT
        mock_redis.hget.assert_called_once_with("job:job-1", "run_at")

    def test_run_time_of_missing_job(self) -> None:
        mock_redis = MagicMock()
        mock_redis.hget.return_value = None

        assert RedisJobScheduler(mock_redis).run_time_of("job-1") is None

    def test_payload_of(self) -> None:
        mock_redis = MagicMock()
        mock_redis.hget.return_value = b'{"appointment_id": "ap-1"}'

        assert RedisJobScheduler(mock_redis).payload_of("job-1") == {"appointment_id": "ap-1"}

    @pytest.mark.parametrize("method", ["hset", "delete", "hget"])
    def test_redis_errors_are_wrapped(self, method: str) -> None:
        mock_redis = MagicMock()
        getattr(mock_redis, method).side_effect = RedisTimeoutError("slow")
        scheduler = RedisJobScheduler(mock_redis)

        with pytest.raises(RedisConnectionError):
            if method == "hset":
                scheduler.schedule("job-1", RUN_AT, {})
            elif method == "delete":
                scheduler.cancel("job-1")
            else:
                scheduler.run_time_of("job-1")
