import asyncio
from collections.abc import Callable

import websockets
from loguru import logger

from tradewatch.models import FeedStatus

BINANCE_TRADE_STREAM_URL = "wss://stream.binance.com:9443/ws/btcusdt@trade"

# Normal closure, sent when the application shuts the feed down.
CLOSE_CODE_NORMAL = 1000
CLOSE_REASON = "App closed"

FrameCallback = Callable[[str], None]


class TradeFeedClient:
    """A single WebSocket subscription to a trade stream.

    Every text frame received is handed to the `on_frame` callback on the
    event loop. The client opens exactly one connection: if it fails or the
    server drops it, the failure is logged and the status returns to
    DISCONNECTED. There is no reconnection and no timeout on the opening
    handshake.
    """

    def __init__(
        self,
        url: str,
        on_frame: FrameCallback,
        close_code: int = CLOSE_CODE_NORMAL,
        close_reason: str = CLOSE_REASON,
    ) -> None:
        """Initializes the client.

        Args:
            url: The stream endpoint, e.g. a Binance `@trade` stream.
            on_frame: Called with each inbound text frame.
            close_code: The close code sent on `stop()`.
            close_reason: The close reason sent on `stop()`.
        """
        self.url = url
        self.on_frame = on_frame
        self.close_code = close_code
        self.close_reason = close_reason
        self._status = FeedStatus.DISCONNECTED
        self._websocket: websockets.ClientConnection | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopping = False

    @property
    def status(self) -> FeedStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Opens the connection in a background task."""
        if self._task is None or self._task.done():
            self._stopping = False
            self._task = asyncio.create_task(self._run())
            logger.info(f"Connecting to trade feed at {self.url}...")
        else:
            logger.warning("Trade feed is already running.")

    async def stop(self) -> None:
        """Closes the connection and waits for the background task to end.

        Safe to call more than once, and before `start()`.
        """
        task, self._task = self._task, None
        if task is None:
            logger.debug("Trade feed is not running.")
            return

        logger.info("Closing trade feed...")
        self._stopping = True
        websocket = self._websocket
        try:
            if websocket is not None:
                await websocket.close(code=self.close_code, reason=self.close_reason)
            else:
                # Still handshaking; nothing to close gracefully.
                task.cancel()
            await task
        except asyncio.CancelledError:
            pass  # Expected cancellation
        finally:
            self._websocket = None
            self._status = FeedStatus.DISCONNECTED
        logger.info("Trade feed closed.")

    async def wait_closed(self) -> None:
        """Waits until the connection has ended, for any reason."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    async def _run(self) -> None:
        """Runs one connection from handshake to close."""
        try:
            async with websockets.connect(self.url, open_timeout=None) as websocket:
                self._websocket = websocket
                self._status = FeedStatus.CONNECTED
                logger.info("WebSocket opened.")
                async for message in websocket:
                    if isinstance(message, bytes):
                        logger.debug(f"Ignoring binary frame of {len(message)} bytes.")
                        continue
                    self._dispatch(message)

            if self._stopping:
                logger.info("WebSocket closed.")
            else:
                logger.warning("WebSocket closed by the server. Not reconnecting.")
        except websockets.exceptions.ConnectionClosed as e:
            logger.error(f"WebSocket connection lost: {e}. Not reconnecting.")
        except (websockets.exceptions.WebSocketException, OSError) as e:
            logger.error(f"WebSocket error: {type(e).__name__}: {e}")
        except Exception:
            logger.exception("Unexpected error in trade feed.")
        finally:
            self._websocket = None
            self._status = FeedStatus.DISCONNECTED

    def _dispatch(self, frame: str) -> None:
        try:
            self.on_frame(frame)
        except Exception:
            logger.exception("Frame callback failed.")
