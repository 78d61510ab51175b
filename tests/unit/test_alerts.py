from collections.abc import Callable

import pytest
from pytest_mock import MockerFixture

from tradewatch.alerts import ALERT_TITLE, LogNotifier, Notifier, VolumeAlerter
from tradewatch.models import Importance, NotificationChannel, TradeAlert


class RaisingNotifier(Notifier):
    """A notifier whose display always fails."""

    def create_channel(self, channel: NotificationChannel) -> None:
        pass

    def notify(self, alert: TradeAlert) -> None:
        raise RuntimeError("display unavailable")


@pytest.fixture
def alerter(notifier: Notifier) -> VolumeAlerter:
    """Provides an alerter with the default threshold of 95."""
    return VolumeAlerter(notifier)


def test_quantity_above_threshold_alerts_once(
    alerter: VolumeAlerter, notifier, trade_frame: Callable[..., str]
) -> None:
    """A single qualifying frame produces exactly one alert."""
    alert = alerter.inspect(trade_frame(quantity="95.5"))

    assert alert is not None
    assert notifier.alerts == [alert]
    assert alert.title == ALERT_TITLE
    assert alert.message == "Trade volume: 95.5"
    assert alert.volume == 95.5
    assert alert.channel_id == "trades_channel"
    assert alerter.alerts_raised == 1


@pytest.mark.parametrize("quantity", ["95", "95.0", "0.001", "0", "-200"])
def test_quantity_at_or_below_threshold_is_silent(
    alerter: VolumeAlerter, notifier, trade_frame: Callable[..., str], quantity: str
) -> None:
    """At or below the threshold, nothing is raised."""
    assert alerter.inspect(trade_frame(quantity=quantity)) is None
    assert notifier.alerts == []


def test_every_qualifying_frame_alerts(
    alerter: VolumeAlerter, notifier, trade_frame: Callable[..., str]
) -> None:
    """There is no de-duplication or suppression window."""
    frame = trade_frame(quantity="120")
    for _ in range(3):
        alerter.inspect(frame)
    assert len(notifier.alerts) == 3


def test_malformed_frame_is_logged_and_swallowed(
    alerter: VolumeAlerter, notifier, log_messages: list[str]
) -> None:
    """A frame without a readable quantity raises no alert and no exception."""
    assert alerter.inspect("{not json") is None
    assert alerter.inspect('{"p": "100"}') is None
    assert notifier.alerts == []
    errors = [m for m in log_messages if m.startswith("ERROR|Could not read trade volume")]
    assert len(errors) == 2


def test_custom_threshold_and_field(notifier) -> None:
    """Threshold and quantity key are configurable."""
    alerter = VolumeAlerter(notifier, threshold=1, quantity_field="size")
    assert alerter.inspect('{"size": 1}') is None
    assert alerter.inspect('{"size": 1.01}') is not None


def test_alert_id_comes_from_wall_clock(
    alerter: VolumeAlerter, trade_frame: Callable[..., str], mocker: MockerFixture
) -> None:
    """The id is the current time in ms, truncated to a signed 32-bit int."""
    mocker.patch("time.time_ns", return_value=1_700_000_000_123 * 1_000_000)
    alert = alerter.inspect(trade_frame(quantity="500"))
    assert alert is not None
    assert alert.alert_id == -807049093


def test_notifier_failure_is_logged(
    trade_frame: Callable[..., str], log_messages: list[str]
) -> None:
    """A failing display backend does not propagate to the feed."""
    alerter = VolumeAlerter(RaisingNotifier())
    assert alerter.inspect(trade_frame(quantity="500")) is None
    assert alerter.alerts_raised == 0
    assert any("Notifier failed to deliver alert" in m for m in log_messages)


def test_log_notifier_creates_channel_once_and_counts(log_messages: list[str]) -> None:
    """LogNotifier keeps one channel per id and counts delivered alerts."""
    log_notifier = LogNotifier()
    channel = NotificationChannel(importance=Importance.HIGH)
    log_notifier.create_channel(channel)
    log_notifier.create_channel(channel)
    assert list(log_notifier.channels) == ["trades_channel"]
    created = [m for m in log_messages if "Notification channel" in m]
    assert len(created) == 1

    log_notifier.notify(
        TradeAlert(
            alert_id=7,
            title=ALERT_TITLE,
            message="Trade volume: 100.0",
            volume=100.0,
            channel_id="trades_channel",
        )
    )
    assert log_notifier.sent_count == 1
    assert any("[ALERT 7] Large trade! Trade volume: 100.0" in m for m in log_messages)


@pytest.mark.parametrize("digits", [400, 5000])
def test_oversized_quantity_is_swallowed(
    alerter: VolumeAlerter, notifier, log_messages: list[str], digits: int
) -> None:
    """An integer quantity too large to read is logged, never raised."""
    frame = '{"p": "1", "q": 1' + "0" * digits + "}"
    assert alerter.inspect(frame) is None
    assert notifier.alerts == []
    assert any(m.startswith("ERROR|Could not read trade volume") for m in log_messages)
