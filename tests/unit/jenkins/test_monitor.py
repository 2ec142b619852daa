"""Unit tests for nestor.jenkins.monitor."""

import asyncio
from datetime import datetime

import httpx
import pytest

from nestor.core.exceptions import InvalidResponseError, TransportError, UnexpectedStatusError
from nestor.jenkins.models import JobSummary, MonitorResult
from nestor.jenkins.monitor import Monitor, seconds_until_next_minute, validate_schedule
from nestor.jenkins.status import StatusCode


class _ScriptedClient:
    """Stand-in for Jenkins whose dashboard calls wait for ``release``."""

    def __init__(self, *outcomes: list[JobSummary] | Exception) -> None:
        self.outcomes = list(outcomes)
        self.release = asyncio.Event()
        self.release.set()
        self.calls = 0
        self.views: list[str | None] = []

    async def dashboard(self, view_name: str | None = None) -> list[JobSummary]:
        self.calls += 1
        self.views.append(view_name)
        await self.release.wait()
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


JOBS = [JobSummary("api", StatusCode.OK), JobSummary("web", StatusCode.FAIL)]


class TestSchedule:
    """Tests for schedule helpers."""

    def test_valid_schedule(self) -> None:
        assert validate_schedule("*/5 * * * *") == "*/5 * * * *"

    @pytest.mark.parametrize("schedule", ["* * * *", "0 * * * * *", ""])
    def test_invalid_schedule(self, schedule: str) -> None:
        with pytest.raises(ValueError):
            validate_schedule(schedule)

    def test_constructor_validates(self) -> None:
        with pytest.raises(ValueError):
            Monitor(_ScriptedClient(), lambda result: None, schedule="every minute")

    def test_seconds_until_next_minute(self) -> None:
        assert seconds_until_next_minute(datetime(2026, 1, 1, 10, 5, 45)) == 15.0
        assert seconds_until_next_minute(datetime(2026, 1, 1, 10, 5, 0)) == 60.0

    def test_is_due(self) -> None:
        monitor = Monitor(_ScriptedClient(), lambda result: None, schedule="*/5 * * * *")
        assert monitor.is_due(datetime(2026, 1, 1, 10, 5))
        assert not monitor.is_due(datetime(2026, 1, 1, 10, 7))


class TestCheck:
    """Tests for a single monitor check."""

    @pytest.mark.asyncio
    async def test_aggregate_of_all_jobs(self) -> None:
        monitor = Monitor(_ScriptedClient(JOBS), lambda result: None)
        result = await monitor.check()
        assert result.status is StatusCode.FAIL
        assert result.error is None

    @pytest.mark.asyncio
    async def test_single_job(self) -> None:
        monitor = Monitor(_ScriptedClient(JOBS), lambda result: None, job_name="api")
        result = await monitor.check()
        assert result.status is StatusCode.OK

    @pytest.mark.asyncio
    async def test_view(self) -> None:
        client = _ScriptedClient(JOBS)
        monitor = Monitor(client, lambda result: None, view_name="team")
        await monitor.check()
        assert client.views == ["team"]

    @pytest.mark.asyncio
    async def test_failure_is_captured(self) -> None:
        error = TransportError("down")
        monitor = Monitor(_ScriptedClient(error), lambda result: None)
        result = await monitor.check()
        assert result.status is None
        assert result.error is error

    @pytest.mark.asyncio
    async def test_against_fake_server(self, fake_jenkins, dashboard_payload) -> None:
        fake_jenkins.add("GET", "/api/json", httpx.Response(500))
        fake_jenkins.add("GET", "/api/json", httpx.Response(200, json=dashboard_payload))
        async with fake_jenkins.client() as jenkins:
            monitor = Monitor(jenkins, lambda result: None)
            first = await monitor.check()
            second = await monitor.check()

        assert isinstance(first.error, UnexpectedStatusError)
        assert second.status is StatusCode.FAIL


class TestTicks:
    """Tests for tick scheduling and overlap."""

    @pytest.mark.asyncio
    async def test_overlapping_tick_is_dropped(self) -> None:
        client = _ScriptedClient(JOBS, JOBS)
        client.release.clear()
        results: list[MonitorResult] = []
        monitor = Monitor(client, results.append)

        assert monitor.trigger() is True
        await asyncio.sleep(0)
        assert monitor.trigger() is False
        assert monitor.skipped_ticks == 1

        client.release.set()
        await monitor._inflight
        assert client.calls == 1
        assert len(results) == 1

        assert monitor.trigger() is True
        await monitor._inflight
        assert client.calls == 2

    @pytest.mark.asyncio
    async def test_failed_check_does_not_stop_later_ticks(self) -> None:
        client = _ScriptedClient(TransportError("down"), JOBS)
        results: list[MonitorResult] = []
        monitor = Monitor(client, results.append)

        monitor.trigger()
        await monitor._inflight
        monitor.trigger()
        await monitor._inflight

        assert results[0].error is not None
        assert results[1].status is StatusCode.FAIL

    @pytest.mark.asyncio
    async def test_async_callback(self) -> None:
        results: list[MonitorResult] = []

        async def on_result(result: MonitorResult) -> None:
            results.append(result)

        monitor = Monitor(_ScriptedClient(JOBS), on_result)
        monitor.trigger()
        await monitor._inflight
        assert results[0].status is StatusCode.FAIL

    @pytest.mark.asyncio
    async def test_run_checks_immediately_until_stopped(self) -> None:
        results: list[MonitorResult] = []
        monitor: Monitor

        def on_result(result: MonitorResult) -> None:
            results.append(result)
            monitor.stop()

        monitor = Monitor(_ScriptedClient(JOBS), on_result)
        await asyncio.wait_for(monitor.run(), timeout=5)

        assert len(results) == 1
        assert results[0].status is StatusCode.FAIL

    @pytest.mark.asyncio
    async def test_stop_before_run_still_checks_once(self) -> None:
        results: list[MonitorResult] = []
        monitor = Monitor(_ScriptedClient(JOBS), results.append)
        monitor.stop()
        await asyncio.wait_for(monitor.run(), timeout=5)
        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_delivered(self) -> None:
        error = KeyError("jobs")
        client = _ScriptedClient(error, JOBS)
        results: list[MonitorResult] = []
        monitor = Monitor(client, results.append)

        monitor.trigger()
        await monitor._inflight
        monitor.trigger()
        await monitor._inflight

        assert results[0].status is None
        assert results[0].error is error
        assert results[1].status is StatusCode.FAIL

    @pytest.mark.asyncio
    async def test_login_page_is_delivered_as_error(self, fake_jenkins, dashboard_payload) -> None:
        fake_jenkins.add("GET", "/api/json", httpx.Response(200, text="<html>login</html>"))
        fake_jenkins.add("GET", "/api/json", httpx.Response(200, json=dashboard_payload))
        results: list[MonitorResult] = []
        async with fake_jenkins.client() as jenkins:
            monitor = Monitor(jenkins, results.append)
            monitor.trigger()
            await monitor._inflight
            monitor.trigger()
            await monitor._inflight

        assert isinstance(results[0].error, InvalidResponseError)
        assert results[1].status is StatusCode.FAIL

    @pytest.mark.asyncio
    async def test_schedule_matches_local_time(self, monkeypatch) -> None:
        # One tenth of a second before 09:00 local; only a 09:00 tick is scheduled
        monkeypatch.setattr(
            "nestor.jenkins.monitor.local_now",
            lambda: datetime(2026, 10, 19, 8, 59, 59, 900000),
        )
        results: list[MonitorResult] = []
        monitor: Monitor

        def on_result(result: MonitorResult) -> None:
            results.append(result)
            if len(results) == 2:
                monitor.stop()

        monitor = Monitor(_ScriptedClient(JOBS, JOBS), on_result, schedule="0 9 * * *")
        await asyncio.wait_for(monitor.run(), timeout=5)

        assert len(results) == 2
