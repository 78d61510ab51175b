import asyncio
import sys
from collections.abc import Coroutine
from typing import Any

import qasync
from loguru import logger
from PySide6.QtWidgets import QApplication


def run_with_asyncio(main_coro: Coroutine[Any, Any, int]) -> int:
    """Runs the application with an integrated Qt and asyncio event loop.

    The asyncio loop is driven by Qt's event loop on the main thread, so
    coroutines and WebSocket callbacks may touch widgets directly.

    Args:
        main_coro: The main coroutine. It should build the UI, start the
            session, and return an exit code once the window has shut down.

    Returns:
        The exit code returned by `main_coro`.
    """
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    # The main window quits explicitly once its async shutdown has finished.
    app.setQuitOnLastWindowClosed(False)

    loop = qasync.QEventLoop(app)
    asyncio.set_event_loop(loop)
    logger.info("qasync event loop installed as the current asyncio event loop.")

    try:
        logger.info("Starting the Qt application event loop.")
        exit_code = loop.run_until_complete(main_coro)
        logger.info("Qt application event loop has finished.")
    finally:
        logger.info("Closing the asyncio event loop.")
        tasks = asyncio.all_tasks(loop=loop)
        for task in tasks:
            task.cancel()
        try:
            loop.run_until_complete(asyncio.gather(*tasks, return_exceptions=True))
        except Exception as e:
            logger.warning(f"Exception during task cancellation: {e}")

        loop.close()
        asyncio.set_event_loop(None)
        logger.info("Asyncio event loop closed.")

    return exit_code
