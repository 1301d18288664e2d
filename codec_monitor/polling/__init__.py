"""
Telemetry polling module.

Handles scheduled polling of the codec.
"""
from .telemetry_collector import (
    CONNECTION_STATS_FETCH,
    DEFAULT_FETCHES,
    STATUS_FETCH,
    FetchDescriptor,
    FetchOutcome,
    PollCycleResult,
    TelemetryCollector,
)
from .scheduler import PollScheduler

__all__ = [
    "CONNECTION_STATS_FETCH",
    "DEFAULT_FETCHES",
    "STATUS_FETCH",
    "FetchDescriptor",
    "FetchOutcome",
    "PollCycleResult",
    "TelemetryCollector",
    "PollScheduler",
]
