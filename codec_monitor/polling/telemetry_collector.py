"""
Telemetry collector for polling codec data.

Runs the ordered list of telemetry fetches that make up one poll cycle
and folds every successful snapshot into the state store.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..connection import endpoints
from ..connection.gateway import DeviceGateway
from ..devices.device_state import DeviceState
from ..devices.snapshot import CodecSnapshot
from ..devices.state_store import StateStore
from ..errors import PollFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchDescriptor:
    """One telemetry source polled every cycle."""
    name: str
    endpoint: str
    method: str = "GET"


STATUS_FETCH = FetchDescriptor("status", endpoints.STATUS)
CONNECTION_STATS_FETCH = FetchDescriptor(
    "connection_statistics", endpoints.CONNECTION_STATISTICS
)

DEFAULT_FETCHES: List[FetchDescriptor] = [STATUS_FETCH, CONNECTION_STATS_FETCH]


@dataclass
class FetchOutcome:
    """Result of one sub-fetch within a cycle."""
    name: str
    success: bool
    data: Optional[Any] = None
    error: Optional[PollFailure] = None
    duration_ms: float = 0.0
    rejected: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PollCycleResult:
    """Everything one tick produced."""
    state: DeviceState
    started_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    outcomes: List[FetchOutcome] = field(default_factory=list)
    discarded: bool = False

    @property
    def succeeded(self) -> List[str]:
        return [o.name for o in self.outcomes if o.success]

    @property
    def failed(self) -> List[str]:
        return [o.name for o in self.outcomes if not o.success]

    @property
    def any_success(self) -> bool:
        return any(o.success for o in self.outcomes)

    def outcome(self, name: str) -> Optional[FetchOutcome]:
        for item in self.outcomes:
            if item.name == name:
                return item
        return None


class TelemetryCollector:
    """
    Collects telemetry from the codec.

    Fetches run strictly in order; a failing fetch is logged and recorded
    but never stops the ones after it.
    """

    def __init__(self, fetches: Optional[Sequence[FetchDescriptor]] = None):
        """
        Initialize the telemetry collector.

        Args:
            fetches: Ordered telemetry sources. Defaults to status then
                connection statistics.
        """
        self.fetches: List[FetchDescriptor] = list(
            DEFAULT_FETCHES if fetches is None else fetches
        )

    def add_fetch(self, descriptor: FetchDescriptor) -> None:
        """Append a telemetry source to the cycle."""
        self.fetches.append(descriptor)

    async def collect(
        self,
        gateway: DeviceGateway,
        descriptor: FetchDescriptor,
    ) -> FetchOutcome:
        """
        Run a single fetch.

        Args:
            gateway: Open codec session.
            descriptor: What to fetch.

        Returns:
            FetchOutcome, with a PollFailure on error.
        """
        result = await gateway.request(descriptor.endpoint, descriptor.method)

        if not result.success:
            error = PollFailure(
                f"{descriptor.name}: {result.error}",
                endpoint=descriptor.endpoint,
                status_code=result.status_code,
                cause=result.error,
            )
            logger.warning(f"Poll fetch failed: {error}")
            return FetchOutcome(
                name=descriptor.name,
                success=False,
                error=error,
                duration_ms=result.duration_ms,
            )

        return FetchOutcome(
            name=descriptor.name,
            success=True,
            data=result.data,
            duration_ms=result.duration_ms,
        )

    async def run_cycle(
        self,
        gateway: DeviceGateway,
        store: StateStore,
        is_current: Optional[Callable[[], bool]] = None,
        fetches: Optional[Sequence[FetchDescriptor]] = None,
    ) -> PollCycleResult:
        """
        Run fetches in order, merging each result as it arrives.

        Args:
            gateway: Open codec session.
            store: State store receiving the snapshots.
            is_current: Returns False once the session has been torn down;
                anything fetched after that is discarded.
            fetches: Override the configured fetch list for this cycle.

        Returns:
            PollCycleResult holding the outcomes and the resulting state.
        """
        cycle = PollCycleResult(state=store.state)

        for descriptor in self.fetches if fetches is None else fetches:
            if is_current is not None and not is_current():
                cycle.discarded = True
                break

            outcome = await self.collect(gateway, descriptor)

            if is_current is not None and not is_current():
                logger.debug(
                    f"Session closed during {descriptor.name}, discarding result"
                )
                cycle.discarded = True
                break

            if outcome.success:
                outcome = self._fold(store, descriptor, outcome)

            cycle.outcomes.append(outcome)

        cycle.state = store.state
        logger.debug(
            f"Poll cycle done: ok={cycle.succeeded} failed={cycle.failed}"
        )
        return cycle

    def _fold(
        self,
        store: StateStore,
        descriptor: FetchDescriptor,
        outcome: FetchOutcome,
    ) -> FetchOutcome:
        try:
            snapshot = CodecSnapshot.from_payload(outcome.data)
        except TypeError as e:
            logger.warning(
                f"Poll fetch failed: {descriptor.name} returned an invalid payload"
            )
            return FetchOutcome(
                name=descriptor.name,
                success=False,
                data=outcome.data,
                error=PollFailure(
                    f"{descriptor.name}: invalid payload ({e})",
                    endpoint=descriptor.endpoint,
                    cause=e,
                ),
                duration_ms=outcome.duration_ms,
            )

        if snapshot.rejected_fields:
            outcome.rejected = snapshot.rejected_fields
            logger.warning(
                f"{descriptor.name} returned unusable values, "
                f"dropped fields: {sorted(outcome.rejected)}"
            )

        store.merge(snapshot)
        return outcome
