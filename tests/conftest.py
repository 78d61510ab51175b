import json
from collections.abc import Callable, Iterator

import pytest
from loguru import logger

from tradewatch.alerts import Notifier
from tradewatch.models import FeedStatus, NotificationChannel, TradeAlert


class RecordingNotifier(Notifier):
    """A notifier that keeps every channel and alert it receives."""

    def __init__(self) -> None:
        self.channels: list[NotificationChannel] = []
        self.alerts: list[TradeAlert] = []

    def create_channel(self, channel: NotificationChannel) -> None:
        if all(c.channel_id != channel.channel_id for c in self.channels):
            self.channels.append(channel)

    def notify(self, alert: TradeAlert) -> None:
        self.alerts.append(alert)


class FakeFeed:
    """Stands in for TradeFeedClient; frames are pushed by the test."""

    def __init__(self, url: str, on_frame: Callable[[str], None]) -> None:
        self.url = url
        self.on_frame = on_frame
        self.status = FeedStatus.DISCONNECTED
        self.start_calls = 0
        self.stop_calls = 0

    def start(self) -> None:
        self.start_calls += 1
        self.status = FeedStatus.CONNECTED

    async def stop(self) -> None:
        self.stop_calls += 1
        self.status = FeedStatus.DISCONNECTED

    async def wait_closed(self) -> None:
        return None

    def push(self, frame: str) -> None:
        self.on_frame(frame)


def make_trade_frame(price: object = "100.00", quantity: object = "1.0") -> str:
    """Builds a Binance-style trade frame."""
    return json.dumps(
        {
            "e": "trade",
            "E": 1700000000000,
            "s": "BTCUSDT",
            "t": 12345,
            "p": price,
            "q": quantity,
            "T": 1700000000000,
            "m": True,
            "M": True,
        }
    )


@pytest.fixture
def trade_frame() -> Callable[..., str]:
    """Provides the trade frame builder."""
    return make_trade_frame


@pytest.fixture
def notifier() -> RecordingNotifier:
    """Provides a notifier that records alerts."""
    return RecordingNotifier()


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Captures loguru output as 'LEVEL|message' strings."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda m: messages.append(str(m).rstrip("\n")),
        level="DEBUG",
        format="{level}|{message}",
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def fake_feed_factory() -> type[FakeFeed]:
    """Provides a feed factory that never touches the network."""
    return FakeFeed
