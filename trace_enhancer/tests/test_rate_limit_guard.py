"""
TDD tests for RateLimitGuard and the killswitch decision.
"""

import dataclasses

import pytest

from trace_enhancer.shared.config import EnhancementConfig
from trace_enhancer.shared.constants import KILLSWITCH_MESSAGE
from trace_enhancer.shared.errors import RateLimitedError, ServiceStateError
from trace_enhancer.shared.models import ServiceStatus
from trace_enhancer.shared.rate_limit_guard import (
    RateLimitGuard,
    evaluate_killswitch,
    failure_count_key,
)
from trace_enhancer.tests.fakes import REPO


class TestEvaluateKillswitch:
    def test_below_threshold_stays_healthy(self):
        t = evaluate_killswitch(ServiceStatus.HEALTHY, 19, 20)
        assert t.status == ServiceStatus.HEALTHY
        assert t.triggered is False
        assert t.messages == ()

    def test_at_threshold_trips(self):
        t = evaluate_killswitch(ServiceStatus.HEALTHY, 20, 20)
        assert t.status == ServiceStatus.ERROR
        assert t.triggered is True
        assert t.messages == (KILLSWITCH_MESSAGE,)

    def test_error_state_never_retriggers(self):
        t = evaluate_killswitch(ServiceStatus.ERROR, 21, 20)
        assert t.status == ServiceStatus.ERROR
        assert t.triggered is False

    def test_healthy_snapshot_past_threshold_does_not_trigger(self):
        t = evaluate_killswitch(ServiceStatus.HEALTHY, 21, 20)
        assert t.status == ServiceStatus.HEALTHY
        assert t.triggered is False


@pytest.mark.asyncio
class TestQuotaFlag:
    async def test_check_passes_when_not_exhausted(self, guard):
        await guard.check(REPO)

    async def test_zero_remaining_sets_flag(self, guard):
        assert await guard.observe_quota(REPO, 0) is True
        with pytest.raises(RateLimitedError):
            await guard.check(REPO)

    async def test_remaining_quota_does_not_set_flag(self, guard):
        assert await guard.observe_quota(REPO, 10) is False
        assert await guard.observe_quota(REPO, None) is False
        await guard.check(REPO)

    async def test_flag_clears_after_ttl(self, guard, clock):
        await guard.observe_quota(REPO, 0)
        clock.advance(EnhancementConfig().rate_limit_ttl_seconds + 1)
        await guard.check(REPO)

    async def test_flag_is_per_repo(self, guard):
        await guard.observe_quota(REPO, 0)
        await guard.check("acme/other")


@pytest.mark.asyncio
class TestRecordFailure:
    async def test_counts_failures(self, guard, store, service):
        await guard.record_failure(service)
        await guard.record_failure(service)
        assert await store.increment(failure_count_key(service.id)) == 3

    async def test_twenty_failures_trip_once(self, guard, service, config_store):
        transitions = [await guard.record_failure(service) for _ in range(21)]
        triggered = [t for t in transitions if t.triggered]
        assert len(triggered) == 1
        assert transitions[19].triggered is True
        assert transitions[20].triggered is False
        assert config_store.error_updates == [(service.id, [KILLSWITCH_MESSAGE])]
        assert service.status == ServiceStatus.ERROR

    async def test_concurrent_snapshots_trip_once(self, guard, service, config_store):
        first = dataclasses.replace(service)
        second = dataclasses.replace(service)
        for _ in range(20):
            await guard.record_failure(first)
        t = await guard.record_failure(second)

        assert t.triggered is False
        assert first.status == ServiceStatus.ERROR
        assert second.status == ServiceStatus.HEALTHY
        assert len(config_store.error_updates) == 1

    async def test_persist_failure_raises(self, guard, service, config_store):
        config_store.fail_update = True
        for _ in range(19):
            await guard.record_failure(service)
        with pytest.raises(ServiceStateError):
            await guard.record_failure(service)
        assert service.status == ServiceStatus.HEALTHY

    async def test_counter_window_expires(self, store, config_store, service, clock):
        guard = RateLimitGuard(store, config_store, EnhancementConfig(
            killswitch_threshold=3, failure_window_seconds=60,
        ))
        await guard.record_failure(service)
        await guard.record_failure(service)
        clock.advance(61)
        t = await guard.record_failure(service)
        assert t.triggered is False
        assert service.status == ServiceStatus.HEALTHY
