"""
Device simulators for testing.
"""
from .codec_simulator import CodecSimulator

__all__ = ["CodecSimulator"]
