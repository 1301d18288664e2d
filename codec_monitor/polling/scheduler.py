"""
Polling scheduler for codec telemetry collection.

Drives one poll cycle per tick on a fixed cadence and hands each
cycle's result to a consumer callback.
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

logger = logging.getLogger(__name__)

TickCallback = Callable[[Any], Any]


class PollScheduler:
    """
    Runs a poll cycle at a fixed interval.

    Features:
    - A single ticker task at a time (start replaces the previous one)
    - Fixed cadence independent of cycle duration
    - Optional skipping of ticks while a cycle is still in flight
    - Cycle and callback errors are logged, never fatal
    """

    def __init__(
        self,
        cycle: Callable[[], Awaitable[Any]],
        skip_overlapping: bool = True,
        name: str = "codec_poll",
    ):
        """
        Initialize the polling scheduler.

        Args:
            cycle: Coroutine function run once per tick.
            skip_overlapping: Skip a tick while the previous cycle runs.
            name: Task name prefix.
        """
        self._cycle = cycle
        self.skip_overlapping = skip_overlapping
        self.name = name

        self._ticker: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()
        self._interval: Optional[float] = None

        # Stats
        self.ticks = 0
        self.completed_cycles = 0
        self.skipped_ticks = 0
        self.failed_cycles = 0

    @property
    def is_polling(self) -> bool:
        """Check if a ticker is active."""
        return self._ticker is not None and not self._ticker.done()

    @property
    def interval(self) -> Optional[float]:
        """Current interval in seconds, None when idle."""
        return self._interval if self.is_polling else None

    async def start(
        self,
        interval: float,
        on_tick: Optional[TickCallback] = None,
    ) -> None:
        """
        Start polling, replacing any active ticker.

        Args:
            interval: Seconds between ticks.
            on_tick: Called with each cycle result; may be a coroutine
                function.

        Raises:
            ValueError: If interval is not positive.
        """
        if interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {interval}")

        if self.is_polling or self._inflight:
            logger.debug("Replacing active poll ticker")
            await self.stop()

        self._interval = interval
        self._ticker = asyncio.create_task(
            self._tick_loop(interval, on_tick),
            name=f"{self.name}_ticker",
        )
        logger.info(f"Polling started (interval={interval}s)")

    async def stop(self) -> None:
        """Stop polling. Does nothing when already idle."""
        ticker, self._ticker = self._ticker, None
        inflight, self._inflight = self._inflight, set()

        if ticker is None and not inflight:
            return

        current = asyncio.current_task()
        tasks = [ticker, *(t for t in inflight if t is not current)]
        if current in inflight:
            tasks.append(current)

        for task in tasks:
            await self._cancel(task)

        self._interval = None
        logger.info("Polling stopped")

    async def _cancel(self, task: Optional[asyncio.Task]) -> None:
        if task is None or task.done():
            return
        task.cancel()
        if task is asyncio.current_task():
            # stop() called from the on_tick callback
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _tick_loop(
        self,
        interval: float,
        on_tick: Optional[TickCallback],
    ) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + interval

        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))

            # Drop slots missed while the loop was busy
            next_tick += interval
            while next_tick <= loop.time():
                next_tick += interval

            self.ticks += 1

            if self.skip_overlapping and self._inflight:
                self.skipped_ticks += 1
                logger.warning("Previous poll cycle still running, skipping tick")
                continue

            task = asyncio.create_task(
                self._run_tick(on_tick),
                name=f"{self.name}_cycle_{self.ticks}",
            )
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def _run_tick(self, on_tick: Optional[TickCallback]) -> None:
        try:
            result = await self._cycle()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failed_cycles += 1
            logger.error(f"Unexpected error in poll cycle: {e}")
            return

        self.completed_cycles += 1

        if on_tick is None:
            return

        try:
            outcome = on_tick(result)
            if inspect.isawaitable(outcome):
                await outcome
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error in tick callback: {e}")

    def get_polling_stats(self) -> Dict[str, Any]:
        """
        Get polling statistics.

        Returns:
            Dictionary of polling stats.
        """
        return {
            "running": self.is_polling,
            "interval": self.interval,
            "ticks": self.ticks,
            "completed_cycles": self.completed_cycles,
            "skipped_ticks": self.skipped_ticks,
            "failed_cycles": self.failed_cycles,
            "inflight": len(self._inflight),
        }
