"""Unit tests for AuditQuotaTracker."""

import asyncio

import pytest

from audit_relay.core.errors import QuotaExceededError
from audit_relay.services.quota_service import RESET_JOB_ID, AuditQuotaTracker


@pytest.fixture
def tracker():
    return AuditQuotaTracker(limit=3, reset_interval_hours=24)


class TestQuotaCounting:
    def test_unknown_key_counts_as_zero(self, tracker):
        status = tracker.check("10.0.0.1")

        assert status.allowed is True
        assert status.current_count == 0
        assert status.limit == 3

    def test_check_does_not_charge(self, tracker):
        tracker.check("10.0.0.1")
        tracker.check("10.0.0.1")

        assert tracker.count("10.0.0.1") == 0

    def test_charge_returns_new_count(self, tracker):
        assert tracker.charge("10.0.0.1") == 1
        assert tracker.charge("10.0.0.1") == 2
        assert tracker.count("10.0.0.1") == 2

    def test_keys_are_independent(self, tracker):
        for _ in range(3):
            tracker.charge("10.0.0.1")

        assert tracker.check("10.0.0.1").allowed is False
        assert tracker.check("10.0.0.2").allowed is True

    def test_request_after_ceiling_is_rejected(self, tracker):
        for _ in range(3):
            tracker.ensure_allowed("10.0.0.1")
            tracker.charge("10.0.0.1")

        with pytest.raises(QuotaExceededError) as exc_info:
            tracker.ensure_allowed("10.0.0.1")

        error = exc_info.value
        assert error.status_code == 429
        assert error.current == 3
        assert error.limit == 3
        assert error.client_id == "10.0.0.1"
        # rejection charges nothing
        assert tracker.count("10.0.0.1") == 3

    def test_rejection_payload(self, tracker):
        for _ in range(3):
            tracker.charge("10.0.0.1")

        with pytest.raises(QuotaExceededError) as exc_info:
            tracker.ensure_allowed("10.0.0.1")

        body = exc_info.value.to_response(expose_details=False)
        assert body == {
            "success": False,
            "message": "Audit limit exceeded. Max 3 per 24 hours.",
            "limit": 3,
            "current": 3,
        }

    def test_remaining_never_negative(self, tracker):
        assert tracker.remaining(1) == 2
        assert tracker.remaining(3) == 0
        assert tracker.remaining(5) == 0

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            AuditQuotaTracker(limit=0)


class TestQuotaReset:
    def test_reset_clears_every_key(self, tracker):
        for key in ("a", "b", "c"):
            for _ in range(3):
                tracker.charge(key)

        tracker.reset()

        assert all(tracker.count(key) == 0 for key in ("a", "b", "c"))

    def test_rejected_key_allowed_after_reset(self, tracker):
        for _ in range(3):
            tracker.charge("10.0.0.1")
        assert tracker.check("10.0.0.1").allowed is False

        tracker.reset()

        assert tracker.check("10.0.0.1").allowed is True
        tracker.ensure_allowed("10.0.0.1")

    @pytest.mark.asyncio
    async def test_reset_job_runs_on_the_loop(self, tracker):
        tracker.charge("10.0.0.1")

        await tracker._reset_job()

        assert tracker.count("10.0.0.1") == 0


class TestQuotaLifecycle:
    @pytest.mark.asyncio
    async def test_start_schedules_reset_and_shutdown_cancels(self, tracker):
        tracker.start()
        try:
            assert tracker.running is True
            job = tracker._scheduler.get_job(RESET_JOB_ID)
            assert job is not None
            assert job.trigger.interval.total_seconds() == 24 * 3600
        finally:
            tracker.shutdown()
        await asyncio.sleep(0)

        assert tracker.running is False

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, tracker):
        tracker.start()
        scheduler = tracker._scheduler
        tracker.start()
        try:
            assert tracker._scheduler is scheduler
        finally:
            tracker.shutdown()
        await asyncio.sleep(0)

    def test_shutdown_without_start_is_noop(self, tracker):
        tracker.shutdown()

        assert tracker.running is False
