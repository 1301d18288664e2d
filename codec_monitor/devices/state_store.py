"""
Single-writer holder for the live codec state.
"""
import logging
from typing import Any

from .device_state import DeviceState
from .reconciler import apply, merge
from .snapshot import CodecSnapshot

logger = logging.getLogger(__name__)


class StateStore:
    """
    Owns the current DeviceState of one client.

    Every write replaces the record with a new merged copy, so readers
    holding a previous state never observe a half-applied update.
    """

    def __init__(self, falsy_as_absent: bool = False):
        self.falsy_as_absent = falsy_as_absent
        self._state = DeviceState()

    @property
    def state(self) -> DeviceState:
        return self._state

    def merge(self, snapshot: CodecSnapshot) -> DeviceState:
        """Fold a telemetry snapshot into the state."""
        self._state = merge(
            self._state,
            snapshot,
            falsy_as_absent=self.falsy_as_absent,
        )
        return self._state

    def apply(self, **values: Any) -> DeviceState:
        """Set locally known values."""
        self._state = apply(self._state, **values)
        return self._state

    def reset(self) -> DeviceState:
        """Return to baseline defaults."""
        self._state = DeviceState()
        logger.debug("Codec state reset to defaults")
        return self._state
