from collections.abc import Callable
from typing import TYPE_CHECKING

from loguru import logger

from tradewatch.alerts import DEFAULT_VOLUME_THRESHOLD, Notifier, VolumeAlerter
from tradewatch.dispatcher import DEFAULT_DRAIN_INTERVAL_SEC, DrainLoop
from tradewatch.feed import BINANCE_TRADE_STREAM_URL, FrameCallback, TradeFeedClient
from tradewatch.intake import FrameIntake
from tradewatch.models import NotificationChannel
from tradewatch.parsing import PRICE_FIELD, QUANTITY_FIELD
from tradewatch.viewmodel import PriceViewModel

if TYPE_CHECKING:
    from tradewatch.config import Settings

DEFAULT_QUEUE_CAPACITY = 1000

FeedFactory = Callable[[str, FrameCallback], TradeFeedClient]


class TradeWatchSession:
    """Owns one run of the trade watcher, from start to teardown.

    Inbound frames take two independent paths. Each frame is offered to the
    bounded intake, which the drain loop empties one frame per interval into
    the price view model. The same raw frame is also checked by the volume
    alerter, so frames dropped by a full intake can still raise alerts.
    """

    def __init__(
        self,
        notifier: Notifier,
        url: str = BINANCE_TRADE_STREAM_URL,
        volume_threshold: float = DEFAULT_VOLUME_THRESHOLD,
        queue_capacity: int = DEFAULT_QUEUE_CAPACITY,
        drain_interval_sec: float = DEFAULT_DRAIN_INTERVAL_SEC,
        price_field: str = PRICE_FIELD,
        quantity_field: str = QUANTITY_FIELD,
        symbol_label: str = "BTC/USDT",
        channel: NotificationChannel | None = None,
        feed_factory: FeedFactory = TradeFeedClient,
    ) -> None:
        self.url = url
        self.notifier = notifier
        self.channel = channel or NotificationChannel()
        self.intake = FrameIntake(queue_capacity)
        self.view_model = PriceViewModel(label=f"{symbol_label} Price")
        self.alerter = VolumeAlerter(
            notifier,
            threshold=volume_threshold,
            quantity_field=quantity_field,
            channel=self.channel,
        )
        self.drain_loop = DrainLoop(
            self.intake,
            self.view_model,
            interval_sec=drain_interval_sec,
            price_field=price_field,
        )
        self.feed = feed_factory(url, self.on_frame)
        self._started = False
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        app_settings: "Settings",
        notifier: Notifier,
        feed_factory: FeedFactory = TradeFeedClient,
    ) -> "TradeWatchSession":
        """Builds a session from the application settings."""
        return cls(
            notifier,
            url=app_settings.feed.url,
            volume_threshold=app_settings.alerts.volume_threshold,
            queue_capacity=app_settings.pipeline.queue_capacity,
            drain_interval_sec=app_settings.pipeline.drain_interval_sec,
            price_field=app_settings.feed.price_field,
            quantity_field=app_settings.feed.quantity_field,
            symbol_label=app_settings.feed.symbol_label,
            channel=NotificationChannel(
                channel_id=app_settings.alerts.channel_id,
                name=app_settings.alerts.channel_name,
            ),
            feed_factory=feed_factory,
        )

    @property
    def is_closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Clears the chart state, creates the alert channel and starts the pipeline.

        Must be called from within a running event loop.
        """
        if self._closed:
            logger.warning("Session is closed and cannot be restarted.")
            return
        if self._started:
            logger.warning("Session is already started.")
            return
        self._started = True
        self.view_model.reset()
        self.notifier.create_channel(self.channel)
        self.feed.start()
        self.drain_loop.start()
        logger.info("Trade watch session started.")

    def on_frame(self, frame: str) -> None:
        """Accepts one inbound frame from the feed. Never raises or blocks."""
        if self._closed:
            logger.debug("Session closed; ignoring late frame.")
            return
        self.intake.offer(frame)
        self.alerter.inspect(frame)

    async def wait_closed(self) -> None:
        """Waits until the feed connection ends. The drain loop keeps running."""
        await self.feed.wait_closed()

    async def close(self) -> None:
        """Releases the connection, halts processing and discards pending frames.

        Idempotent. The drain loop is stopped even if the feed teardown fails.
        """
        if self._closed:
            return
        self._closed = True
        logger.info("Closing trade watch session...")
        try:
            await self.feed.stop()
        finally:
            await self.drain_loop.stop()
            self.intake.clear()
        logger.success("Trade watch session closed.")
