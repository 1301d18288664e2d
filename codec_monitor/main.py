"""
Codec Monitor - Main Entry Point.

Starts the monitor that:
1. Connects to the configured codec
2. Polls its telemetry on a fixed interval
3. Writes the overlay export after every poll cycle
"""
import asyncio
import json
import logging
import os
import signal
import sys
import tempfile
from pathlib import Path
from typing import Optional

from .client import CodecClient
from .config import MonitorSettings, get_monitor_settings
from .devices.device_state import DeviceState
from .presentation.formatter import build_export

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the monitor process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def write_export(path: Path, payload: str) -> None:
    """Replace the export file atomically so readers never see partial JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
        os.replace(tmp_name, path)
    except OSError:
        os.unlink(tmp_name)
        raise


class CodecMonitor:
    """
    Main monitor orchestrator.

    Owns one CodecClient and publishes its state for overlay tools.
    """

    def __init__(
        self,
        settings: Optional[MonitorSettings] = None,
        client: Optional[CodecClient] = None,
    ):
        """
        Initialize the monitor.

        Args:
            settings: Monitor settings.
            client: Codec client; created from settings when omitted.
        """
        self.settings = settings or get_monitor_settings()
        self.client = client or CodecClient(self.settings)

        self.exports_written = 0

        self._running = False
        self._shutdown_event = asyncio.Event()

    async def start(self) -> bool:
        """
        Connect and start polling.

        Returns:
            True if the codec is connected and polling started.
        """
        logger.info(f"Starting {self.settings.app_name}...")

        result = await self.client.connect()
        if not result.success:
            logger.error(f"Could not connect to codec: {result.error}")
            return False

        await self.client.start_polling(callback=self._on_state)

        self._running = True
        logger.info(
            f"{self.settings.app_name} polling {self.settings.base_url} "
            f"every {self.client.scheduler.interval}s"
        )
        return True

    async def stop(self) -> None:
        """Stop polling and disconnect."""
        if not self._running:
            return

        logger.info(f"Stopping {self.settings.app_name}...")
        self._running = False
        self._shutdown_event.set()

        await self.client.disconnect()

        # Publish the disconnected state for the overlay
        self._on_state(self.client.state)

        logger.info(f"{self.settings.app_name} stopped")

    async def serve_forever(self) -> None:
        """Run until shutdown."""
        await self._shutdown_event.wait()

    def _on_state(self, state: DeviceState) -> None:
        export = self.settings.export
        payload = json.dumps(build_export(state), indent=export.indent)

        if export.output_path is None:
            logger.debug(f"Overlay state: {payload}")
            return

        try:
            write_export(export.output_path, payload)
            self.exports_written += 1
        except OSError as e:
            logger.error(f"Could not write overlay export to {export.output_path}: {e}")


def setup_signal_handlers(monitor: CodecMonitor, loop: asyncio.AbstractEventLoop):
    """Setup signal handlers for graceful shutdown."""
    def signal_handler():
        logger.info("Received shutdown signal")
        loop.create_task(monitor.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            signal.signal(sig, lambda s, f: signal_handler())


async def main() -> int:
    """Main entry point."""
    settings = get_monitor_settings()
    configure_logging("DEBUG" if settings.debug else settings.log_level)

    monitor = CodecMonitor(settings)
    setup_signal_handlers(monitor, asyncio.get_running_loop())

    try:
        if not await monitor.start():
            return 1
        await monitor.serve_forever()
    finally:
        await monitor.stop()

    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
