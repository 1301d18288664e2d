"""
Device state module.

Provides the reconciled codec state, partial snapshots and the merge rule.
"""
from .device_state import DeviceState
from .snapshot import CodecSnapshot
from .reconciler import apply, merge
from .state_store import StateStore

__all__ = [
    "DeviceState",
    "CodecSnapshot",
    "StateStore",
    "apply",
    "merge",
]
