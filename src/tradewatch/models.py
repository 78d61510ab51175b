"""Plain data types shared by the pipeline, the alerter and the UI."""

import enum
from dataclasses import dataclass


class FeedStatus(enum.Enum):
    """Connection state of the trade feed."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class Importance(enum.IntEnum):
    """Importance of a notification channel, lowest to highest."""

    LOW = 1
    DEFAULT = 2
    HIGH = 3


@dataclass(frozen=True)
class PricePoint:
    """A single point on the price chart.

    `index` is the tick index: a counter of recorded prices, not a timestamp.
    """

    index: int
    price: float


@dataclass(frozen=True)
class PriceSnapshot:
    """The view model state right after a price was recorded."""

    point: PricePoint
    price: float
    change_pct: float


@dataclass(frozen=True)
class NotificationChannel:
    """Describes the channel alerts are posted to."""

    channel_id: str = "trades_channel"
    name: str = "Trades Notifications"
    importance: Importance = Importance.HIGH


@dataclass(frozen=True)
class TradeAlert:
    """A large-trade alert ready to hand to a notifier."""

    alert_id: int
    title: str
    message: str
    volume: float
    channel_id: str
