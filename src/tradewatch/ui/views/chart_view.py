from collections.abc import Sequence

import numpy as np
import pyqtgraph as pg
from PySide6.QtWidgets import QVBoxLayout, QWidget

from tradewatch.models import PricePoint

pg.setConfigOptions(antialias=True, useOpenGL=False)
pg.setConfigOption("background", "#161A25")
pg.setConfigOption("foreground", "#D8D9DD")

LINE_COLOR = "#F0B90B"
LINE_WIDTH = 2


class TickIndexAxis(pg.AxisItem):
    """An x axis that only labels whole tick indices."""

    def tickStrings(  # noqa: N802
        self, values: list[float], _scale: float, _spacing: float
    ) -> list[str]:
        return [str(int(v)) if float(v).is_integer() else "" for v in values]


class PriceChartView(QWidget):
    """A line chart of trade price against tick index."""

    def __init__(self, label: str, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._label = label
        self._setup_ui()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self._plot = pg.PlotWidget(
            axisItems={"bottom": TickIndexAxis(orientation="bottom")}
        )
        self._plot.showGrid(x=False, y=True, alpha=0.3)
        self._plot.showAxis("left")
        self._plot.hideAxis("right")
        self._plot.setLabel("left", "Price")
        self._plot.addLegend()

        self._line = self._plot.plot(
            [], [], name=self._label, pen=pg.mkPen(LINE_COLOR, width=LINE_WIDTH)
        )
        layout.addWidget(self._plot)

    def set_series(self, points: Sequence[PricePoint]) -> None:
        """Redraws the whole line from the given points."""
        if not points:
            self.clear_chart()
            return
        x = np.fromiter((p.index for p in points), dtype=float, count=len(points))
        y = np.fromiter((p.price for p in points), dtype=float, count=len(points))
        self._line.setData(x=x, y=y)

    def clear_chart(self) -> None:
        self._line.setData([], [])
