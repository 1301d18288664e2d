"""
Pydantic schemas for the overlay export.

This is the contract consumed by display/overlay tools; endpoint paths
on the codec side may change without affecting it.
"""
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]


class AudioStatus(BaseModel):
    """Mute flag and audio levels (dBFS)."""
    model_config = ConfigDict(populate_by_name=True)

    muted: bool
    input_level: Number = Field(alias="inputLevel")
    output_level: Number = Field(alias="outputLevel")


class NetworkStatus(BaseModel):
    """Formatted link statistics."""
    model_config = ConfigDict(populate_by_name=True)

    bitrate: str
    jitter: str
    packet_loss: str = Field(alias="packetLoss")
    quality: str


class OverlayExport(BaseModel):
    """Complete overlay state."""
    model_config = ConfigDict(populate_by_name=True)

    is_connected: bool = Field(alias="isConnected")
    codec_type: str = Field(alias="codecType")
    audio_status: AudioStatus = Field(alias="audioStatus")
    network: NetworkStatus
    active_profile: str = Field(alias="activeProfile")
    duration: str
    timestamp: str
