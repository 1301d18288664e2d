"""
Presentation module.

Derives overlay-ready values from the reconciled codec state.
"""
from .export import AudioStatus, NetworkStatus, OverlayExport
from .formatter import (
    ConnectionQuality,
    build_export,
    classify_quality,
    connection_quality,
    export_json,
    format_duration,
)

__all__ = [
    "AudioStatus",
    "NetworkStatus",
    "OverlayExport",
    "ConnectionQuality",
    "build_export",
    "classify_quality",
    "connection_quality",
    "export_json",
    "format_duration",
]
