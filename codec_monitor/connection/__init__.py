"""
Connection module.

Handles HTTP sessions with the codec REST API.
"""
from .gateway import DeviceGateway, GatewayResult
from .endpoints import (
    AUDIO_MUTE,
    AUDIO_STATISTICS,
    CONNECTION_STATISTICS,
    STATUS,
    SYSTEM_INFO,
    SYSTEM_REBOOT,
    profile_activate,
)

__all__ = [
    "DeviceGateway",
    "GatewayResult",
    "AUDIO_MUTE",
    "AUDIO_STATISTICS",
    "CONNECTION_STATISTICS",
    "STATUS",
    "SYSTEM_INFO",
    "SYSTEM_REBOOT",
    "profile_activate",
]
