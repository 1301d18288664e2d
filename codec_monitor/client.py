"""
Codec client.

Connects to one codec, keeps its reconciled state current through
scheduled polling and exposes the control commands and overlay export.
"""
import inspect
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

import httpx

from .config import MonitorSettings, get_monitor_settings
from .connection import endpoints
from .connection.gateway import DeviceGateway
from .devices.device_state import DeviceState
from .devices.state_store import StateStore
from .errors import ConnectFailure, ControlFailure, OperationResult
from .polling.scheduler import PollScheduler, TickCallback
from .polling.telemetry_collector import (
    CONNECTION_STATS_FETCH,
    STATUS_FETCH,
    FetchDescriptor,
    PollCycleResult,
    TelemetryCollector,
)
from .presentation.formatter import build_export, export_json

logger = logging.getLogger(__name__)

FALLBACK_CODEC_TYPE = "Tieline Codec"

MIN_PORT = 1
MAX_PORT = 65535


class CodecClient:
    """
    Client for one codec's REST API.

    Responsibilities:
    - Open and tear down the connection session
    - Poll telemetry and reconcile it into DeviceState
    - Send mute, profile and reboot commands
    - Export the state for overlay tools

    Public operations return results (or None for telemetry getters)
    and never raise on device or network errors.
    """

    def __init__(
        self,
        settings: Optional[MonitorSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        fetches: Optional[Sequence[FetchDescriptor]] = None,
    ):
        """
        Initialize the codec client.

        Args:
            settings: Monitor settings.
            transport: Optional httpx transport for every session.
            fetches: Ordered telemetry sources polled each cycle.
        """
        self.settings = settings or get_monitor_settings()
        self._transport = transport

        self.store = StateStore(
            falsy_as_absent=self.settings.reconcile.falsy_as_absent,
        )
        self.collector = TelemetryCollector(fetches)
        self.scheduler = PollScheduler(
            self.poll_once,
            skip_overlapping=self.settings.polling.skip_overlapping,
        )

        self._session: Optional[DeviceGateway] = None

        self.last_cycle: Optional[PollCycleResult] = None
        self.last_successful_poll: Optional[datetime] = None

    @property
    def state(self) -> DeviceState:
        """Current reconciled state."""
        return self.store.state

    @property
    def is_connected(self) -> bool:
        """Check if a session is open."""
        return self._session is not None and self._session.is_open

    @property
    def session(self) -> Optional[DeviceGateway]:
        return self._session

    # ==========================================
    # Connection
    # ==========================================

    async def connect(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> OperationResult:
        """
        Open a session and read the codec's system info.

        Arguments left as None fall back to the codec settings.

        Returns:
            OperationResult with the system info on success, or a
            ConnectFailure.
        """
        codec = self.settings.codec
        host = host or codec.host
        port = port if port is not None else codec.port

        if not host:
            return OperationResult.fail(ConnectFailure("No codec host configured"))
        if not MIN_PORT <= port <= MAX_PORT:
            return OperationResult.fail(
                ConnectFailure(f"Invalid port {port}, must be {MIN_PORT}-{MAX_PORT}")
            )

        if self._session:
            await self.disconnect()

        session = DeviceGateway(
            base_url=f"http://{host}:{port}",
            username=username if username is not None else codec.username,
            password=password if password is not None else codec.password,
            timeout=codec.timeout,
            transport=self._transport,
        )

        result = None
        try:
            await session.open()
            result = await session.request(endpoints.SYSTEM_INFO)
        except httpx.InvalidURL as e:
            return OperationResult.fail(
                ConnectFailure(f"Invalid codec address: {e}", cause=e)
            )
        finally:
            if result is None or not result.success:
                await session.close()

        if not result.success:
            logger.error(f"Connection to {session.base_url} failed: {result.error}")
            return OperationResult.fail(
                ConnectFailure(
                    str(result.error),
                    endpoint=endpoints.SYSTEM_INFO,
                    status_code=result.status_code,
                    cause=result.error,
                )
            )

        info = result.data if isinstance(result.data, dict) else {}
        self._session = session
        self.store.apply(
            connected=True,
            codec_type=info.get("model") or FALLBACK_CODEC_TYPE,
        )

        logger.info(f"Connected to {self.state.codec_type} at {session.base_url}")
        return OperationResult.ok(result.data)

    async def disconnect(self) -> None:
        """Stop polling and close the session. Safe to call when idle."""
        await self.scheduler.stop()

        session, self._session = self._session, None
        self.store.apply(connected=False)

        if session:
            await session.close()
            logger.info(f"Disconnected from {session.base_url}")

    def _is_live(self, session: DeviceGateway) -> bool:
        return self._session is session and session.is_open

    # ==========================================
    # Telemetry
    # ==========================================

    async def _fetch_merged(self, descriptor: FetchDescriptor) -> Optional[Any]:
        session = self._session
        if not session:
            return None

        cycle = await self.collector.run_cycle(
            session,
            self.store,
            is_current=lambda: self._is_live(session),
            fetches=[descriptor],
        )

        outcome = cycle.outcome(descriptor.name)
        if outcome is None or not outcome.success:
            return None
        return outcome.data

    async def get_status(self) -> Optional[Any]:
        """Fetch /status and merge it. Returns the raw payload or None."""
        return await self._fetch_merged(STATUS_FETCH)

    async def get_connection_stats(self) -> Optional[Any]:
        """Fetch connection statistics and merge them."""
        return await self._fetch_merged(CONNECTION_STATS_FETCH)

    async def get_audio_stats(self) -> Optional[Any]:
        """Fetch audio statistics. Passed through, not merged."""
        session = self._session
        if not session:
            return None

        result = await session.request(endpoints.AUDIO_STATISTICS)
        if not result.success:
            logger.error(f"Error getting audio statistics: {result.error}")
            return None
        return result.data

    async def poll_once(self) -> PollCycleResult:
        """
        Run one full poll cycle.

        Returns:
            PollCycleResult; when not connected it holds no outcomes and
            the unchanged state.
        """
        session = self._session
        if not session:
            return PollCycleResult(state=self.state)

        cycle = await self.collector.run_cycle(
            session,
            self.store,
            is_current=lambda: self._is_live(session),
        )

        self.last_cycle = cycle
        if cycle.any_success:
            self.last_successful_poll = datetime.now(timezone.utc)
        return cycle

    async def start_polling(
        self,
        interval: Optional[float] = None,
        callback: Optional[TickCallback] = None,
    ) -> None:
        """
        Poll on a fixed cadence, replacing any running poller.

        Args:
            interval: Seconds between cycles; defaults to the polling
                settings and is clamped to the configured minimum.
            callback: Receives the DeviceState after every cycle.
        """
        polling = self.settings.polling
        interval = polling.interval if interval is None else interval
        interval = max(interval, polling.min_interval)

        async def on_tick(cycle: PollCycleResult) -> None:
            if callback is None or cycle.discarded:
                return
            outcome = callback(cycle.state)
            if inspect.isawaitable(outcome):
                await outcome

        await self.scheduler.start(interval, on_tick)

    async def stop_polling(self) -> None:
        """Stop the poller."""
        await self.scheduler.stop()

    # ==========================================
    # Controls
    # ==========================================

    async def _send_command(
        self,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
    ) -> OperationResult:
        session = self._session
        if not session:
            return OperationResult.fail(ControlFailure("Not connected"))

        result = await session.request(endpoint, "POST", body)

        if not result.success:
            logger.error(f"Command {endpoint} failed: {result.error}")
            return OperationResult.fail(
                ControlFailure(
                    str(result.error),
                    endpoint=endpoint,
                    status_code=result.status_code,
                    cause=result.error,
                )
            )

        if not self._is_live(session):
            return OperationResult.fail(
                ControlFailure("Session closed", endpoint=endpoint)
            )

        return OperationResult.ok(result.data)

    async def set_mute(
        self,
        channel: Optional[str] = None,
        mute: bool = True,
    ) -> OperationResult:
        """
        Mute or unmute a channel.

        Args:
            channel: Channel name, defaults to the configured mute channel.
            mute: True to mute, False to unmute.
        """
        channel = channel or self.settings.codec.mute_channel
        result = await self._send_command(
            endpoints.AUDIO_MUTE,
            {"channel": channel, "mute": mute},
        )
        if result.success:
            self.store.apply(muted=mute)
            logger.info(f"Channel {channel} {'muted' if mute else 'unmuted'}")
        return result

    async def set_profile(self, profile_id: Any) -> OperationResult:
        """Activate a connection profile."""
        profile_id = str(profile_id)
        result = await self._send_command(endpoints.profile_activate(profile_id))
        if result.success:
            self.store.apply(profile=profile_id)
            logger.info(f"Profile {profile_id} activated")
        return result

    async def reboot(self) -> OperationResult:
        """Reboot the codec and tear the session down."""
        result = await self._send_command(endpoints.SYSTEM_REBOOT)
        if result.success:
            logger.warning("Codec rebooting, closing session")
            await self.disconnect()
        return result

    # ==========================================
    # Export
    # ==========================================

    def get_state_for_overlay(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Overlay export object for the current state."""
        return build_export(self.state, now=now)

    def export_json(self, now: Optional[datetime] = None) -> str:
        """Overlay export serialized to JSON."""
        return export_json(
            self.state,
            indent=self.settings.export.indent,
            now=now,
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get client statistics."""
        return {
            "connected": self.is_connected,
            "base_url": self._session.base_url if self._session else None,
            "last_successful_poll": (
                self.last_successful_poll.isoformat()
                if self.last_successful_poll
                else None
            ),
            "polling": self.scheduler.get_polling_stats(),
        }
