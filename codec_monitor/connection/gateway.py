"""
HTTP gateway to the codec REST API.

One gateway instance is one connection session: it owns the
httpx client, the base address and the Basic auth credentials.
"""
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from ..errors import GatewayError

logger = logging.getLogger(__name__)


@dataclass
class GatewayResult:
    """Result of a single request to the codec."""
    success: bool
    data: Optional[Any] = None
    error: Optional[GatewayError] = None
    status_code: Optional[int] = None
    duration_ms: float = 0.0


class DeviceGateway:
    """
    Issues individual HTTP requests to the codec.

    Responsibilities:
    - Hold the session base address and credentials
    - Perform exactly one attempt per request
    - Turn every failure into a GatewayResult instead of raising
    """

    def __init__(
        self,
        base_url: str,
        username: str = "admin",
        password: str = "",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the gateway.

        Args:
            base_url: Codec base address, e.g. http://10.0.0.5:80.
            username: Basic auth user.
            password: Basic auth password.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.timeout = timeout
        self.opened_at: Optional[datetime] = None

        self._password = password
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def is_open(self) -> bool:
        """Check if the session accepts requests."""
        return self._client is not None

    async def open(self) -> None:
        """Create the underlying HTTP client."""
        if self._client:
            return

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=httpx.BasicAuth(self.username, self._password),
            headers={"Accept": "application/json"},
            timeout=self.timeout,
            transport=self._transport,
        )
        self.opened_at = datetime.now(timezone.utc)
        logger.info(f"Codec session opened: {self.base_url}")

    async def close(self) -> None:
        """Close the HTTP client. Safe to call more than once."""
        if self._client:
            client, self._client = self._client, None
            await client.aclose()
            logger.info(f"Codec session closed: {self.base_url}")

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Any] = None,
    ) -> GatewayResult:
        """
        Send one request to the codec.

        Args:
            endpoint: Path under the base address, e.g. /api/v1/status.
            method: HTTP method.
            body: JSON-serializable request body.

        Returns:
            GatewayResult with parsed JSON on success, or the error.
        """
        if not self._client:
            return GatewayResult(
                success=False,
                error=GatewayError("Session closed", endpoint=endpoint),
            )

        start_time = time.monotonic()

        try:
            response = await self._client.request(
                method,
                endpoint,
                json=body,
            )
        except (httpx.HTTPError, OSError, OverflowError) as e:
            # Socket errors are not always wrapped by httpx
            duration_ms = (time.monotonic() - start_time) * 1000
            logger.debug(f"{method} {endpoint} failed: {e!r}")
            return GatewayResult(
                success=False,
                error=GatewayError(
                    str(e) or type(e).__name__,
                    endpoint=endpoint,
                    cause=e,
                ),
                duration_ms=duration_ms,
            )

        duration_ms = (time.monotonic() - start_time) * 1000

        if not response.is_success:
            return GatewayResult(
                success=False,
                error=GatewayError(
                    f"HTTP {response.status_code}",
                    endpoint=endpoint,
                    status_code=response.status_code,
                ),
                status_code=response.status_code,
                duration_ms=duration_ms,
            )

        if not response.content:
            return GatewayResult(
                success=True,
                status_code=response.status_code,
                duration_ms=duration_ms,
            )

        try:
            data = response.json()
        except ValueError as e:
            return GatewayResult(
                success=False,
                error=GatewayError(
                    f"Malformed JSON: {e}",
                    endpoint=endpoint,
                    status_code=response.status_code,
                    cause=e,
                ),
                status_code=response.status_code,
                duration_ms=duration_ms,
            )

        logger.debug(
            f"{method} {endpoint} -> {response.status_code} "
            f"in {duration_ms:.1f}ms"
        )

        return GatewayResult(
            success=True,
            data=data,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )

    def __repr__(self) -> str:
        return f"DeviceGateway(base_url={self.base_url}, open={self.is_open})"
