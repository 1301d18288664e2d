"""
Partial telemetry snapshots.

A snapshot is the JSON payload of one codec endpoint. Any field may be
missing; presence is tracked explicitly so that a reported 0 or false is
distinguishable from a field the endpoint did not send.
"""
from typing import Any, Dict, Optional, Set, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    field_validator,
)

Number = Union[int, float]


class CodecSnapshot(BaseModel):
    """Telemetry reported by /api/v1/status or /api/v1/connection/statistics."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        allow_inf_nan=False,
    )

    profile: Optional[str] = Field(default=None, alias="active_profile")
    bitrate_tx: Optional[Number] = None
    bitrate_rx: Optional[Number] = None
    jitter: Optional[Number] = None
    packet_loss: Optional[Number] = None
    audio_level_in: Optional[Number] = None
    audio_level_out: Optional[Number] = None
    muted: Optional[bool] = None
    connection_duration: Optional[Number] = None

    _rejected: Dict[str, Any] = PrivateAttr(default_factory=dict)

    @field_validator("profile", mode="before")
    @classmethod
    def _profile_as_text(cls, value: Any) -> Any:
        # Profiles are addressed by numeric id on some firmware
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @classmethod
    def _payload_keys(cls, location: str) -> Set[str]:
        for name, info in cls.model_fields.items():
            if location in (name, info.alias):
                return {name, info.alias} - {None}
        return {location}

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "CodecSnapshot":
        """
        Build a snapshot from a decoded JSON payload.

        Fields with an unusable value (wrong type, NaN, infinity) are left
        out of the snapshot and listed in rejected_fields; the remaining
        fields are kept.

        Raises:
            TypeError: If the payload is not a JSON object.
        """
        if payload is None:
            return cls()
        if not isinstance(payload, dict):
            raise TypeError(
                f"Expected a JSON object, got {type(payload).__name__}"
            )

        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            bad_keys: Set[str] = set()
            for error in e.errors():
                if error["loc"]:
                    bad_keys |= cls._payload_keys(str(error["loc"][0]))

        snapshot = cls.model_validate(
            {key: value for key, value in payload.items() if key not in bad_keys}
        )
        snapshot._rejected = {
            key: payload[key] for key in bad_keys if key in payload
        }
        return snapshot

    @property
    def rejected_fields(self) -> Dict[str, Any]:
        """Payload keys dropped because their value could not be used."""
        return dict(self._rejected)

    def present_fields(self) -> Dict[str, Any]:
        """Fields the payload actually carried with a non-null value."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }

    @property
    def is_empty(self) -> bool:
        return not self.present_fields()
