from collections.abc import Callable

from loguru import logger

from tradewatch.models import PricePoint, PriceSnapshot

PriceListener = Callable[[PriceSnapshot], None]


class PriceViewModel:
    """Holds everything the price window displays.

    The state is the chart series, the last recorded price and the
    percentage change between the last two recorded prices. The series only
    grows: one point per successfully parsed price frame, indexed by a tick
    counter.
    """

    def __init__(self, label: str = "BTC/USDT Price") -> None:
        self.label = label
        self._series: list[PricePoint] = []
        self._tick_index = 0
        self._last_price: float | None = None
        self._change_pct = 0.0
        self._listeners: list[PriceListener] = []

    @property
    def series(self) -> list[PricePoint]:
        """A copy of the recorded price points, oldest first."""
        return list(self._series)

    @property
    def last_price(self) -> float | None:
        return self._last_price

    @property
    def change_pct(self) -> float:
        return self._change_pct

    @property
    def price_text(self) -> str:
        if self._last_price is None:
            return "Current Price: --"
        return f"Current Price: ${self._last_price:.2f}"

    @property
    def change_text(self) -> str:
        return f"Price Change: {self._change_pct:.2f}%"

    def add_listener(self, listener: PriceListener) -> None:
        """Registers a callback invoked after every recorded price."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: PriceListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def record_price(self, price: float) -> PriceSnapshot:
        """Appends a price to the series and recomputes the change.

        The change is relative to the previously recorded price. With no
        previous price, or a previous price of zero, the change is 0.0.

        Args:
            price: The trade price.

        Returns:
            The snapshot that was sent to listeners.
        """
        point = PricePoint(self._tick_index, price)
        self._series.append(point)
        self._tick_index += 1

        previous = self._last_price
        if previous:
            self._change_pct = (price - previous) / previous * 100
        else:
            self._change_pct = 0.0
        self._last_price = price

        snapshot = PriceSnapshot(point=point, price=price, change_pct=self._change_pct)
        self._notify(snapshot)
        return snapshot

    def reset(self) -> None:
        """Clears all recorded state. Listeners stay registered."""
        self._series.clear()
        self._tick_index = 0
        self._last_price = None
        self._change_pct = 0.0

    def _notify(self, snapshot: PriceSnapshot) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception(f"Price listener {listener!r} failed.")

    def __len__(self) -> int:
        return len(self._series)
