"""
Codec Monitor - REST API poller for broadcast audio codecs.

Reconciles codec telemetry into a single state and exports it for
display and overlay tools.
"""
from .client import CodecClient
from .config import MonitorSettings, get_monitor_settings
from .devices import CodecSnapshot, DeviceState, merge
from .errors import (
    CodecError,
    ConnectFailure,
    ControlFailure,
    GatewayError,
    OperationResult,
    PollFailure,
)
from .main import CodecMonitor
from .polling import FetchDescriptor, PollCycleResult, PollScheduler
from .presentation import (
    ConnectionQuality,
    build_export,
    classify_quality,
    format_duration,
)

__all__ = [
    "CodecClient",
    "CodecMonitor",
    "MonitorSettings",
    "get_monitor_settings",
    "CodecSnapshot",
    "DeviceState",
    "merge",
    "CodecError",
    "ConnectFailure",
    "ControlFailure",
    "GatewayError",
    "OperationResult",
    "PollFailure",
    "FetchDescriptor",
    "PollCycleResult",
    "PollScheduler",
    "ConnectionQuality",
    "build_export",
    "classify_quality",
    "format_duration",
]
