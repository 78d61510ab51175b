from loguru import logger
from PySide6.QtCore import QObject
from PySide6.QtWidgets import QApplication, QStyle, QSystemTrayIcon

from tradewatch.alerts import Notifier
from tradewatch.models import Importance, NotificationChannel, TradeAlert

# How long a balloon stays up, in milliseconds.
DISPLAY_MS = 8000


class TrayNotifier(Notifier):
    """Shows alerts as system tray balloons.

    High-importance channels use the warning balloon style; anything lower
    uses the information style.
    """

    def __init__(self, parent: QObject | None = None) -> None:
        icon = QApplication.style().standardIcon(
            QStyle.StandardPixmap.SP_MessageBoxWarning
        )
        self._tray = QSystemTrayIcon(icon, parent)
        self._channels: dict[str, NotificationChannel] = {}

    def create_channel(self, channel: NotificationChannel) -> None:
        if channel.channel_id in self._channels:
            return
        self._channels[channel.channel_id] = channel
        self._tray.setToolTip(channel.name)
        if QSystemTrayIcon.isSystemTrayAvailable():
            self._tray.show()
        else:
            logger.warning("No system tray available; alerts will only be logged.")
        logger.info(f"Notification channel '{channel.name}' created.")

    def notify(self, alert: TradeAlert) -> None:
        channel = self._channels.get(alert.channel_id)
        if channel is None:
            logger.warning(
                f"Alert {alert.alert_id} posted to unknown channel '{alert.channel_id}'."
            )
            return
        logger.info(f"[ALERT {alert.alert_id}] {alert.title} {alert.message}")
        if not self._tray.isVisible():
            return
        icon = (
            QSystemTrayIcon.MessageIcon.Warning
            if channel.importance >= Importance.HIGH
            else QSystemTrayIcon.MessageIcon.Information
        )
        self._tray.showMessage(alert.title, alert.message, icon, DISPLAY_MS)

    def hide(self) -> None:
        self._tray.hide()
