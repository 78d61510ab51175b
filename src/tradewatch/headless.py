"""Runs the trade watcher without a display, logging prices and alerts."""

import asyncio
import sys
from pathlib import Path

from loguru import logger

from tradewatch.alerts import LogNotifier
from tradewatch.config import Settings, settings
from tradewatch.logging_config import setup_logging
from tradewatch.models import PriceSnapshot
from tradewatch.session import TradeWatchSession


def _log_snapshot(snapshot: PriceSnapshot) -> None:
    logger.info(
        f"#{snapshot.point.index} price={snapshot.price:.2f} "
        f"change={snapshot.change_pct:.2f}%"
    )


async def run_headless(app_settings: Settings) -> int:
    """Runs one session until the feed connection ends or the task is cancelled.

    Returns:
        The number of alerts raised.
    """
    notifier = LogNotifier()
    session = TradeWatchSession.from_settings(app_settings, notifier)
    session.view_model.add_listener(_log_snapshot)
    session.start()
    try:
        await session.wait_closed()
        logger.warning("Feed connection ended; the chart will no longer update.")
    finally:
        await session.close()
    return notifier.sent_count


def main() -> None:
    """The synchronous entry point for the headless runner."""
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
    try:
        alerts = asyncio.run(run_headless(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        sys.exit(0)
    except Exception:
        logger.exception("An unhandled exception reached the top-level entry point.")
        sys.exit(1)
    logger.info(f"Session ended after {alerts} alert(s).")
    sys.exit(0)


if __name__ == "__main__":
    main()
