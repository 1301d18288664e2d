"""
Codec state tracking.

Holds the reconciled view of the codec built from successive
partial telemetry snapshots.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Union

Number = Union[int, float]

DEFAULT_PROFILE = "N/A"
DEFAULT_CODEC_TYPE = "Unknown"
SILENCE_DBFS = -60


@dataclass
class DeviceState:
    """
    Reconciled state of one codec.

    Every field keeps the most recent value reported by any poll;
    fields absent from a snapshot keep their previous value.
    """
    # Connection
    connected: bool = False
    profile: str = DEFAULT_PROFILE
    codec_type: str = DEFAULT_CODEC_TYPE
    connection_duration: Number = 0  # seconds

    # Network
    bitrate_tx: Number = 0  # kbps
    bitrate_rx: Number = 0  # kbps
    jitter: Number = 0  # ms
    packet_loss: Number = 0  # percent

    # Audio
    audio_level_in: Number = SILENCE_DBFS  # dBFS
    audio_level_out: Number = SILENCE_DBFS  # dBFS
    muted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    def __repr__(self) -> str:
        return (
            f"DeviceState("
            f"connected={self.connected}, "
            f"profile={self.profile}, "
            f"codec={self.codec_type})"
        )
