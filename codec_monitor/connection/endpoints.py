"""Codec REST API paths."""

SYSTEM_INFO = "/api/v1/system/info"
SYSTEM_REBOOT = "/api/v1/system/reboot"
STATUS = "/api/v1/status"
CONNECTION_STATISTICS = "/api/v1/connection/statistics"
AUDIO_STATISTICS = "/api/v1/audio/statistics"
AUDIO_MUTE = "/api/v1/audio/mute"


def profile_activate(profile_id: str) -> str:
    return f"/api/v1/profiles/{profile_id}/activate"
