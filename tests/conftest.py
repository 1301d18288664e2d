"""
Shared pytest fixtures for Codec Monitor tests.

Provides fixtures for:
- Monitor settings
- Virtual codec (httpx.MockTransport)
- Codec clients, connected or not
"""
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from codec_monitor.client import CodecClient
from codec_monitor.config import (
    CodecSettings,
    ExportSettings,
    MonitorSettings,
    PollingSettings,
    ReconcileSettings,
)
from codec_monitor.connection.gateway import DeviceGateway
from tests.simulators import CodecSimulator

CODEC_HOST = "codec.test"
CODEC_PASSWORD = "secret"


# ============================================================================
# Settings Fixtures
# ============================================================================

@pytest.fixture
def settings() -> MonitorSettings:
    """Settings pointing at the virtual codec with fast polling."""
    return MonitorSettings(
        codec=CodecSettings(host=CODEC_HOST, password=CODEC_PASSWORD, timeout=1.0),
        polling=PollingSettings(interval=0.05, min_interval=0.01),
        reconcile=ReconcileSettings(),
        export=ExportSettings(),
    )


# ============================================================================
# Simulator Fixtures
# ============================================================================

@pytest.fixture
def codec() -> CodecSimulator:
    """Virtual codec with default telemetry."""
    return CodecSimulator(password=CODEC_PASSWORD)


@pytest_asyncio.fixture
async def gateway(codec) -> AsyncGenerator[DeviceGateway, None]:
    """Open gateway session against the virtual codec."""
    session = DeviceGateway(
        base_url=f"http://{CODEC_HOST}:80",
        username="admin",
        password=CODEC_PASSWORD,
        transport=codec.transport,
    )
    await session.open()
    yield session
    await session.close()


# ============================================================================
# Client Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def client(settings, codec) -> AsyncGenerator[CodecClient, None]:
    """Codec client wired to the virtual codec, not yet connected."""
    codec_client = CodecClient(settings, transport=codec.transport)
    yield codec_client
    await codec_client.disconnect()


@pytest_asyncio.fixture
async def connected_client(client) -> CodecClient:
    """Codec client with an open session."""
    result = await client.connect()
    assert result.success, result.error
    return client
