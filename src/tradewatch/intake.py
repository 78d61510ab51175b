import queue

from loguru import logger


class FrameIntake:
    """A bounded FIFO holding area between the feed and the drain loop.

    Built on `queue.Queue`, so the feed may offer frames from any thread while
    the drain loop polls. Neither side ever blocks: a frame offered while the
    intake is full is discarded and logged, and polling an empty intake
    returns None.
    """

    def __init__(self, capacity: int) -> None:
        """Initializes the intake.

        Args:
            capacity: The maximum number of pending frames.

        Raises:
            ValueError: If the capacity is not a positive integer.
        """
        if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity <= 0:
            err_msg = "Capacity must be a positive integer."
            raise ValueError(err_msg)
        self._capacity = capacity
        self._queue: queue.Queue[str] = queue.Queue(maxsize=capacity)
        self._dropped = 0

    @property
    def capacity(self) -> int:
        """The maximum number of frames the intake can hold."""
        return self._capacity

    @property
    def dropped(self) -> int:
        """How many frames were discarded because the intake was full."""
        return self._dropped

    def offer(self, frame: str) -> bool:
        """Adds a frame if there is room.

        Returns:
            True if the frame was queued, False if it was dropped.
        """
        try:
            self._queue.put_nowait(frame)
        except queue.Full:
            self._dropped += 1
            logger.warning(
                f"Frame intake is full ({self._capacity}). Dropping frame. "
                f"Total dropped: {self._dropped}."
            )
            return False
        return True

    def poll(self) -> str | None:
        """Removes and returns the oldest pending frame, or None if empty."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def clear(self) -> None:
        """Discards every pending frame."""
        while self.poll() is not None:
            pass

    def __len__(self) -> int:
        return self._queue.qsize()

    def __repr__(self) -> str:
        return (
            f"FrameIntake(capacity={self._capacity}, size={len(self)}, "
            f"dropped={self._dropped})"
        )
