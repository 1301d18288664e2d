"""
Human-facing values derived from the codec state.

All functions are pure: they read a DeviceState and never modify it.
"""
import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from ..devices.device_state import DeviceState, Number
from .export import AudioStatus, NetworkStatus, OverlayExport


class ConnectionQuality(str, Enum):
    """Link quality rating shown by overlays."""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    DISCONNECTED = "disconnected"


# (max jitter ms, max packet loss %) -> rating, checked in order
QUALITY_THRESHOLDS = (
    (10, 0.1, ConnectionQuality.EXCELLENT),
    (30, 0.5, ConnectionQuality.GOOD),
    (50, 1.0, ConnectionQuality.FAIR),
)


def classify_quality(
    jitter: Number,
    packet_loss: Number,
    connected: bool = True,
) -> ConnectionQuality:
    """
    Rate the link from jitter and packet loss.

    Args:
        jitter: Jitter in milliseconds.
        packet_loss: Packet loss in percent.
        connected: When False the rating is always DISCONNECTED.

    Returns:
        ConnectionQuality rating.
    """
    if not connected:
        return ConnectionQuality.DISCONNECTED

    for max_jitter, max_loss, rating in QUALITY_THRESHOLDS:
        if jitter < max_jitter and packet_loss < max_loss:
            return rating

    return ConnectionQuality.POOR


def connection_quality(state: DeviceState) -> ConnectionQuality:
    """Rate the link of a reconciled state."""
    return classify_quality(state.jitter, state.packet_loss, state.connected)


def format_duration(seconds: Number) -> str:
    """
    Format a duration as zero-padded HH:MM:SS.

    Negative values clamp to zero, fractions are truncated and hours
    grow past two digits when needed.
    """
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def _format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_bitrate(state: DeviceState) -> str:
    return f"{_format_number(state.bitrate_tx)}/{_format_number(state.bitrate_rx)} kbps"


def format_jitter(state: DeviceState) -> str:
    return f"{_format_number(state.jitter)} ms"


def format_packet_loss(state: DeviceState) -> str:
    return f"{float(state.packet_loss):.2f}%"


def build_export(
    state: DeviceState,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the overlay export object.

    Args:
        state: Reconciled codec state.
        now: Generation time; defaults to the current UTC time.

    Returns:
        Dictionary with isConnected, codecType, audioStatus, network,
        activeProfile, duration and timestamp.
    """
    timestamp = now or datetime.now(timezone.utc)

    export = OverlayExport(
        is_connected=state.connected,
        codec_type=state.codec_type,
        audio_status=AudioStatus(
            muted=state.muted,
            input_level=state.audio_level_in,
            output_level=state.audio_level_out,
        ),
        network=NetworkStatus(
            bitrate=format_bitrate(state),
            jitter=format_jitter(state),
            packet_loss=format_packet_loss(state),
            quality=connection_quality(state).value,
        ),
        active_profile=state.profile,
        duration=format_duration(state.connection_duration),
        timestamp=timestamp.isoformat(),
    )
    return export.model_dump(by_alias=True)


def export_json(
    state: DeviceState,
    indent: Optional[int] = 2,
    now: Optional[datetime] = None,
) -> str:
    """Serialize the overlay export to JSON text."""
    return json.dumps(build_export(state, now=now), indent=indent)
