"""
Error taxonomy for the Codec Monitor.

Errors are carried as values inside results rather than raised out of
public operations.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


class CodecError(Exception):
    """Base class for all codec errors."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint
        self.status_code = status_code
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class GatewayError(CodecError):
    """A single HTTP exchange with the codec failed."""


class ConnectFailure(CodecError):
    """Initial connection (network, auth or non-2xx) failed."""


class PollFailure(CodecError):
    """A telemetry sub-fetch failed during a poll cycle."""


class ControlFailure(CodecError):
    """A mute, profile or reboot command failed."""


@dataclass
class OperationResult:
    """Outcome of a public client operation."""
    success: bool
    data: Optional[Any] = None
    error: Optional[CodecError] = None

    @classmethod
    def ok(cls, data: Optional[Any] = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: CodecError) -> "OperationResult":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: Dict[str, Any] = {"success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = str(self.error)
        return result
