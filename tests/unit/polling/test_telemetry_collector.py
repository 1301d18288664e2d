"""
Unit tests for TelemetryCollector.

Tests fetch ordering, per-fetch failure isolation and session guards.
"""
import httpx
import pytest

from codec_monitor.devices.state_store import StateStore
from codec_monitor.errors import PollFailure
from codec_monitor.polling.telemetry_collector import (
    DEFAULT_FETCHES,
    FetchDescriptor,
    TelemetryCollector,
)


@pytest.fixture
def collector():
    return TelemetryCollector()


@pytest.fixture
def store():
    return StateStore()


class TestRunCycle:
    """Test a full poll cycle."""

    @pytest.mark.asyncio
    async def test_fetches_run_in_order(self, collector, store, gateway, codec):
        """Test status is fetched before connection statistics."""
        await collector.run_cycle(gateway, store)

        assert codec.paths() == [
            "/api/v1/status",
            "/api/v1/connection/statistics",
        ]

    @pytest.mark.asyncio
    async def test_both_snapshots_merged(self, collector, store, gateway):
        """Test fields from both endpoints end up in the state."""
        cycle = await collector.run_cycle(gateway, store)

        assert cycle.succeeded == ["status", "connection_statistics"]
        assert cycle.state.profile == "Studio Link"
        assert cycle.state.connection_duration == 3661
        assert cycle.state.bitrate_tx == 256
        assert cycle.state.jitter == 4
        assert store.state == cycle.state

    @pytest.mark.asyncio
    async def test_stats_failure_keeps_status(self, collector, store, gateway, codec):
        """Test a failing statistics fetch still merges status fields."""
        codec.fail("/api/v1/connection/statistics", 500)

        cycle = await collector.run_cycle(gateway, store)

        assert cycle.succeeded == ["status"]
        assert cycle.failed == ["connection_statistics"]
        assert cycle.state.profile == "Studio Link"
        assert cycle.state.bitrate_tx == 0

        failure = cycle.outcome("connection_statistics").error
        assert isinstance(failure, PollFailure)
        assert failure.status_code == 500

    @pytest.mark.asyncio
    async def test_status_failure_does_not_abort(self, collector, store, gateway, codec):
        """Test a failing first fetch still runs the second."""
        codec.fail("/api/v1/status", httpx.ConnectError("unreachable"))

        cycle = await collector.run_cycle(gateway, store)

        assert cycle.failed == ["status"]
        assert cycle.succeeded == ["connection_statistics"]
        assert cycle.state.jitter == 4

    @pytest.mark.asyncio
    async def test_failures_keep_previous_values(self, collector, store, gateway, codec):
        """Test a fully failed cycle leaves the state untouched."""
        await collector.run_cycle(gateway, store)
        before = store.state
        codec.fail("/api/v1/status", 500)
        codec.fail("/api/v1/connection/statistics", 500)

        cycle = await collector.run_cycle(gateway, store)

        assert not cycle.any_success
        assert cycle.state == before

    @pytest.mark.asyncio
    async def test_non_object_payload_is_poll_failure(self, collector, store, gateway, codec):
        """Test a payload that is not a JSON object is recorded as a failure."""
        codec.fail("/api/v1/status", "[1, 2, 3]")

        cycle = await collector.run_cycle(gateway, store)

        outcome = cycle.outcome("status")
        assert not outcome.success
        assert "invalid payload" in str(outcome.error)
        assert cycle.state.jitter == 4

    @pytest.mark.asyncio
    async def test_unusable_field_dropped_alone(self, collector, store, gateway, codec):
        """Test a bad value is dropped while its siblings are merged."""
        codec.status = {
            "active_profile": "Remote OB",
            "muted": True,
            "audio_level_in": "n/a",
        }

        cycle = await collector.run_cycle(gateway, store)

        outcome = cycle.outcome("status")
        assert outcome.success
        assert outcome.rejected == {"audio_level_in": "n/a"}
        assert cycle.state.profile == "Remote OB"
        assert cycle.state.muted is True
        assert cycle.state.audio_level_in == -60

    @pytest.mark.asyncio
    async def test_clean_payload_rejects_nothing(self, collector, store, gateway):
        """Test valid payloads report no dropped fields."""
        cycle = await collector.run_cycle(gateway, store)

        assert all(o.rejected == {} for o in cycle.outcomes)

    @pytest.mark.asyncio
    async def test_discarded_when_session_replaced(self, collector, store, gateway, codec):
        """Test results fetched after teardown are not merged."""
        checks = iter([True, False])

        cycle = await collector.run_cycle(
            gateway, store, is_current=lambda: next(checks, False)
        )

        assert cycle.discarded
        assert cycle.outcomes == []
        assert store.state.profile == "N/A"
        assert codec.paths() == ["/api/v1/status"]

    @pytest.mark.asyncio
    async def test_fetch_override(self, collector, store, gateway, codec):
        """Test a cycle can run a subset of fetches."""
        cycle = await collector.run_cycle(gateway, store, fetches=[DEFAULT_FETCHES[1]])

        assert [o.name for o in cycle.outcomes] == ["connection_statistics"]
        assert codec.paths() == ["/api/v1/connection/statistics"]


class TestFetchDescriptors:
    """Test configurable telemetry sources."""

    def test_default_fetches(self):
        """Test the default cycle is status then connection statistics."""
        collector = TelemetryCollector()

        assert [f.endpoint for f in collector.fetches] == [
            "/api/v1/status",
            "/api/v1/connection/statistics",
        ]

    @pytest.mark.asyncio
    async def test_added_fetch_runs_last(self, store, gateway, codec):
        """Test an extra source joins the cycle without other changes."""
        codec.audio_statistics = {"audio_level_in": -9}
        collector = TelemetryCollector()
        collector.add_fetch(FetchDescriptor("audio", "/api/v1/audio/statistics"))

        cycle = await collector.run_cycle(gateway, store)

        assert codec.paths()[-1] == "/api/v1/audio/statistics"
        assert cycle.state.audio_level_in == -9

    def test_default_list_not_shared(self):
        """Test adding a fetch does not change the module default."""
        collector = TelemetryCollector()
        collector.add_fetch(FetchDescriptor("x", "/x"))

        assert len(DEFAULT_FETCHES) == 2
