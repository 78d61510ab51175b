import abc

from loguru import logger

from tradewatch.models import NotificationChannel, TradeAlert
from tradewatch.parsing import QUANTITY_FIELD, FrameParseError, parse_quantity
from tradewatch.utils.time import alert_id_from_clock

DEFAULT_VOLUME_THRESHOLD = 95.0
ALERT_TITLE = "Large trade!"


class Notifier(abc.ABC):
    """An abstract base class for alert backends.

    A backend first has a channel created on it, then receives alerts posted
    to that channel. Creating a channel that already exists is a no-op.
    """

    @abc.abstractmethod
    def create_channel(self, channel: NotificationChannel) -> None:
        """Registers a channel that alerts can be posted to."""
        raise NotImplementedError

    @abc.abstractmethod
    def notify(self, alert: TradeAlert) -> None:
        """Displays or records a single alert."""
        raise NotImplementedError


class LogNotifier(Notifier):
    """Writes alerts to the application log. Used when there is no display."""

    def __init__(self) -> None:
        self.channels: dict[str, NotificationChannel] = {}
        self.sent_count = 0

    def create_channel(self, channel: NotificationChannel) -> None:
        if channel.channel_id in self.channels:
            return
        self.channels[channel.channel_id] = channel
        logger.info(
            f"Notification channel '{channel.name}' ({channel.channel_id}) created "
            f"with {channel.importance.name} importance."
        )

    def notify(self, alert: TradeAlert) -> None:
        if alert.channel_id not in self.channels:
            logger.warning(
                f"Alert {alert.alert_id} posted to unknown channel '{alert.channel_id}'."
            )
        self.sent_count += 1
        logger.warning(f"[ALERT {alert.alert_id}] {alert.title} {alert.message}")


class VolumeAlerter:
    """Raises an alert for every trade frame whose quantity exceeds a threshold.

    There is no rate limiting or de-duplication: each qualifying frame gets
    its own alert.
    """

    def __init__(
        self,
        notifier: Notifier,
        threshold: float = DEFAULT_VOLUME_THRESHOLD,
        quantity_field: str = QUANTITY_FIELD,
        channel: NotificationChannel | None = None,
    ) -> None:
        self.notifier = notifier
        self.threshold = float(threshold)
        self.quantity_field = quantity_field
        self.channel = channel or NotificationChannel()
        self.alerts_raised = 0

    def inspect(self, frame: str) -> TradeAlert | None:
        """Checks one raw frame and alerts if its quantity is above the threshold.

        Args:
            frame: The raw text frame, as received from the feed.

        Returns:
            The alert that was sent, or None.
        """
        try:
            volume = parse_quantity(frame, self.quantity_field)
        except FrameParseError as e:
            logger.error(f"Could not read trade volume: {e}")
            return None

        logger.debug(f"Received frame: {frame}")
        logger.debug(f"Trade volume: {volume}")

        if volume <= self.threshold:
            return None

        alert = TradeAlert(
            alert_id=alert_id_from_clock(),
            title=ALERT_TITLE,
            message=f"Trade volume: {volume}",
            volume=volume,
            channel_id=self.channel.channel_id,
        )
        try:
            self.notifier.notify(alert)
        except Exception:
            logger.exception(f"Notifier failed to deliver alert {alert.alert_id}.")
            return None
        self.alerts_raised += 1
        return alert
