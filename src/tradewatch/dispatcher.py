import asyncio

from loguru import logger

from tradewatch.intake import FrameIntake
from tradewatch.parsing import PRICE_FIELD, FrameParseError, parse_price
from tradewatch.viewmodel import PriceViewModel

DEFAULT_DRAIN_INTERVAL_SEC = 1.0


class DrainLoop:
    """Moves frames from the intake into the price view model on a timer.

    Once per interval, at most one pending frame is taken from the intake,
    its price is parsed and recorded. Frames that fail to parse are logged
    and dropped without touching the view model.
    """

    def __init__(
        self,
        intake: FrameIntake,
        view_model: PriceViewModel,
        interval_sec: float = DEFAULT_DRAIN_INTERVAL_SEC,
        price_field: str = PRICE_FIELD,
    ) -> None:
        """Initializes the drain loop.

        Args:
            intake: The frame intake to poll.
            view_model: The view model to record parsed prices into.
            interval_sec: Seconds between ticks.
            price_field: The frame key holding the trade price.

        Raises:
            ValueError: If the interval is not a positive number.
        """
        if not isinstance(interval_sec, int | float) or interval_sec <= 0:
            err_msg = "Interval must be a positive number."
            raise ValueError(err_msg)
        self.intake = intake
        self.view_model = view_model
        self.interval_sec = float(interval_sec)
        self.price_field = price_field
        self._task: asyncio.Task[None] | None = None
        self._running = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def tick(self) -> bool:
        """Processes at most one pending frame.

        Returns:
            True if a price point was recorded.
        """
        frame = self.intake.poll()
        if frame is None:
            return False

        logger.debug(f"Processing frame: {frame}")
        try:
            price = parse_price(frame, self.price_field)
        except FrameParseError as e:
            logger.error(f"Error processing frame: {e}")
            return False

        self.view_model.record_price(price)
        return True

    def start(self) -> None:
        """Starts the timer loop in a background task."""
        if self._task is None or self._task.done():
            self._running.set()
            self._task = asyncio.create_task(self._run())
            logger.info(f"Drain loop started (interval {self.interval_sec:.3f}s).")
        else:
            logger.warning("Drain loop is already running.")

    async def stop(self) -> None:
        """Stops the timer loop. Safe to call more than once."""
        if not self._running.is_set():
            logger.debug("Drain loop is not running.")
            return

        logger.info("Stopping drain loop...")
        self._running.clear()
        if self._task:
            try:
                self._task.cancel()
                await self._task
            except asyncio.CancelledError:
                pass  # Expected cancellation
            finally:
                self._task = None
        logger.info("Drain loop stopped.")

    async def _run(self) -> None:
        """The timer loop. The first tick happens one interval after start."""
        while self._running.is_set():
            try:
                await asyncio.sleep(self.interval_sec)
                if not self._running.is_set():
                    break
                self.tick()
            except asyncio.CancelledError:
                logger.debug("Drain loop cancelled.")
                break
            except Exception:
                logger.exception("Unexpected error in drain loop.")
        logger.info("Drain loop terminated.")
