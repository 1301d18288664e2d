"""
Unit tests for DeviceGateway.

Tests request handling and the conversion of every failure into a result.
"""
import base64
import json

import httpx
import pytest

from codec_monitor.connection.gateway import DeviceGateway
from codec_monitor.errors import GatewayError


class TestRequest:
    """Test single requests against the virtual codec."""

    @pytest.mark.asyncio
    async def test_get_returns_json(self, gateway, codec):
        """Test a 2xx response yields the decoded body."""
        result = await gateway.request("/api/v1/status")

        assert result.success
        assert result.data == codec.status
        assert result.status_code == 200
        assert result.error is None

    @pytest.mark.asyncio
    async def test_basic_auth_header_sent(self, gateway, codec):
        """Test every request carries Basic credentials."""
        await gateway.request("/api/v1/status")

        expected = base64.b64encode(b"admin:secret").decode()
        assert codec.requests[0].headers["Authorization"] == f"Basic {expected}"
        assert codec.requests[0].headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self, gateway, codec):
        """Test the body is serialized as JSON."""
        result = await gateway.request(
            "/api/v1/audio/mute", "POST", {"channel": "tx", "mute": True}
        )

        assert result.success
        assert json.loads(codec.requests[0].content) == {"channel": "tx", "mute": True}

    @pytest.mark.asyncio
    async def test_non_2xx_is_error(self, gateway, codec):
        """Test an error status becomes a GatewayError."""
        codec.fail("/api/v1/status", 503)

        result = await gateway.request("/api/v1/status")

        assert not result.success
        assert isinstance(result.error, GatewayError)
        assert result.error.status_code == 503
        assert result.status_code == 503
        assert "503" in str(result.error)

    @pytest.mark.asyncio
    async def test_network_error_is_error(self, gateway, codec):
        """Test transport exceptions never escape."""
        cause = httpx.ConnectError("connection refused")
        codec.fail("/api/v1/status", cause)

        result = await gateway.request("/api/v1/status")

        assert not result.success
        assert result.error.cause is cause
        assert "connection refused" in str(result.error)

    @pytest.mark.asyncio
    async def test_timeout_is_error(self, gateway, codec):
        """Test timeouts are reported as failures."""
        codec.fail("/api/v1/status", httpx.ReadTimeout("timed out"))

        result = await gateway.request("/api/v1/status")

        assert not result.success
        assert isinstance(result.error.cause, httpx.TimeoutException)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "cause",
        [OverflowError("port must be 0-65535"), OSError("network unreachable")],
    )
    async def test_socket_error_is_error(self, gateway, codec, cause):
        """Test unwrapped socket errors are returned, not raised."""
        codec.fail("/api/v1/status", cause)

        result = await gateway.request("/api/v1/status")

        assert not result.success
        assert result.error.cause is cause

    @pytest.mark.asyncio
    async def test_malformed_json_is_error(self, gateway, codec):
        """Test an unparseable body is reported as a failure."""
        codec.fail("/api/v1/status", "{not json")

        result = await gateway.request("/api/v1/status")

        assert not result.success
        assert "Malformed JSON" in str(result.error)
        assert result.status_code == 200

    @pytest.mark.asyncio
    async def test_empty_body_succeeds(self, gateway):
        """Test a 2xx without a body succeeds with no data."""
        result = await gateway.request("/api/v1/system/reboot", "POST")

        assert result.success
        assert result.data is None
        assert result.status_code == 202

    @pytest.mark.asyncio
    async def test_wrong_credentials_rejected(self, codec):
        """Test a 401 is surfaced as a failure."""
        session = DeviceGateway(
            "http://codec.test:80",
            password="wrong",
            transport=codec.transport,
        )
        await session.open()
        try:
            result = await session.request("/api/v1/system/info")
        finally:
            await session.close()

        assert not result.success
        assert result.status_code == 401


class TestLifecycle:
    """Test session open/close."""

    @pytest.mark.asyncio
    async def test_closed_session_rejects_requests(self, codec):
        """Test requests fail once the session is closed."""
        session = DeviceGateway("http://codec.test:80", transport=codec.transport)
        await session.open()
        await session.close()

        result = await session.request("/api/v1/status")

        assert not result.success
        assert str(result.error) == "Session closed"
        assert codec.requests == []

    @pytest.mark.asyncio
    async def test_close_twice(self, codec):
        """Test closing is idempotent."""
        session = DeviceGateway("http://codec.test:80", transport=codec.transport)
        await session.open()

        await session.close()
        await session.close()

        assert not session.is_open

    @pytest.mark.asyncio
    async def test_open_sets_timestamp(self, codec):
        """Test opened_at is recorded."""
        session = DeviceGateway("http://codec.test:80/", transport=codec.transport)
        assert session.opened_at is None

        await session.open()
        try:
            assert session.is_open
            assert session.opened_at is not None
            assert session.base_url == "http://codec.test:80"
        finally:
            await session.close()
