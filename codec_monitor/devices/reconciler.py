"""
State reconciliation.

Merges partial snapshots into the running DeviceState without letting a
missing field erase a value written by another endpoint.
"""
from dataclasses import fields, replace
from typing import Any, Dict

from .device_state import DeviceState
from .snapshot import CodecSnapshot

_STATE_FIELDS = frozenset(f.name for f in fields(DeviceState))


def _select_changes(
    candidates: Dict[str, Any],
    falsy_as_absent: bool,
) -> Dict[str, Any]:
    changes = {}
    for name, value in candidates.items():
        if name not in _STATE_FIELDS or value is None:
            continue
        if falsy_as_absent and not value:
            continue
        changes[name] = value
    return changes


def merge(
    previous: DeviceState,
    incoming: CodecSnapshot,
    *,
    falsy_as_absent: bool = False,
) -> DeviceState:
    """
    Merge a snapshot into a state.

    Args:
        previous: Current state. Not modified.
        incoming: Partial snapshot from one endpoint.
        falsy_as_absent: Treat 0, false and empty strings as missing,
            for firmware that reports unknown values that way.

    Returns:
        New state with every present snapshot field applied.
    """
    changes = _select_changes(incoming.present_fields(), falsy_as_absent)
    if not changes:
        return replace(previous)
    return replace(previous, **changes)


def apply(state: DeviceState, **values: Any) -> DeviceState:
    """
    Apply locally known values (command results, connect/disconnect).

    Uses the same presence rule as merge: None means "not known".

    Raises:
        ValueError: If a name is not a DeviceState field.
    """
    unknown = set(values) - _STATE_FIELDS
    if unknown:
        raise ValueError(f"Unknown state fields: {sorted(unknown)}")
    return replace(state, **_select_changes(values, falsy_as_absent=False))
