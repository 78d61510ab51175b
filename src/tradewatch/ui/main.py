import asyncio
import sys
from pathlib import Path

from loguru import logger
from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent, QFont
from PySide6.QtWidgets import (
    QLabel,
    QMainWindow,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from tradewatch.config import Settings, settings
from tradewatch.logging_config import setup_logging
from tradewatch.models import PriceSnapshot
from tradewatch.session import TradeWatchSession
from tradewatch.ui.notifications import TrayNotifier
from tradewatch.ui.qt_asyncio_integration import run_with_asyncio
from tradewatch.ui.views.chart_view import PriceChartView


class MainWindow(QMainWindow):
    """The single application window: two summary labels over a price chart."""

    def __init__(self, app_settings: Settings) -> None:
        super().__init__()
        self._settings = app_settings
        self._notifier = TrayNotifier(self)
        self._session = TradeWatchSession.from_settings(app_settings, self._notifier)
        self._session.view_model.add_listener(self._on_price)
        self._shutdown_task: asyncio.Task[None] | None = None
        self._closed = asyncio.Event()

        self._setup_ui()

    @property
    def session(self) -> TradeWatchSession:
        return self._session

    def _setup_ui(self) -> None:
        """Sets up the window, labels and chart."""
        self.setWindowTitle(f"TradeWatch - {self._settings.feed.symbol_label}")
        self.resize(960, 600)

        central = QWidget(self)
        layout = QVBoxLayout(central)

        summary_font = QFont()
        summary_font.setPointSize(14)

        view_model = self._session.view_model
        self._price_label = QLabel(view_model.price_text, central)
        self._price_label.setFont(summary_font)
        self._change_label = QLabel(view_model.change_text, central)
        self._change_label.setFont(summary_font)
        for label in (self._price_label, self._change_label):
            label.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter)
            layout.addWidget(label)

        self._chart_view = PriceChartView(view_model.label, central)
        layout.addWidget(self._chart_view, stretch=1)

        self.setCentralWidget(central)
        self.setStatusBar(QStatusBar(self))

    def start_session(self) -> None:
        """Starts the feed and the drain loop. Requires a running event loop."""
        self._session.start()
        self.statusBar().showMessage(f"Streaming {self._settings.feed.url}")

    def _on_price(self, _snapshot: PriceSnapshot) -> None:
        view_model = self._session.view_model
        self._chart_view.set_series(view_model.series)
        self._price_label.setText(view_model.price_text)
        self._change_label.setText(view_model.change_text)

    async def wait_closed(self) -> None:
        """Waits until the window has been closed and the session torn down."""
        await self._closed.wait()

    async def _shutdown(self) -> None:
        logger.info("Initiating graceful shutdown...")
        try:
            await self._session.close()
        finally:
            self._notifier.hide()
            self._closed.set()
        logger.success("Shutdown complete.")

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        """Overrides QMainWindow.closeEvent to trigger async shutdown."""
        logger.info("Close event triggered.")
        event.accept()
        if self._shutdown_task is None:
            self._shutdown_task = asyncio.create_task(self._shutdown())


async def main_async() -> int:
    """The main async entry point for the application."""
    log_dir = (
        Path(settings.general.log_directory)
        if settings.general.log_directory
        else None
    )
    setup_logging(
        console_level=settings.general.log_level_console,
        file_level=settings.general.log_level_file,
        log_dir=log_dir,
    )

    main_window = MainWindow(settings)
    main_window.show()
    main_window.start_session()
    await main_window.wait_closed()
    return 0


def main() -> None:
    """The synchronous entry point for the application."""
    try:
        exit_code = run_with_asyncio(main_async())
        sys.exit(exit_code)
    except Exception:
        logger.exception("An unhandled exception reached the top-level entry point.")
        sys.exit(1)


if __name__ == "__main__":
    main()
