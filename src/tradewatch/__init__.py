# src/tradewatch/__init__.py
"""TradeWatch: a live trade-price chart with large-trade alerts.

The package subscribes to a public cryptocurrency trade stream, feeds raw
frames through a bounded intake queue that is drained on a fixed timer, and
keeps a small view model (price series, last price, percentage change) that
the Qt window renders. Trades whose quantity exceeds a threshold raise a
desktop alert.

Key modules:
- `feed`: the WebSocket client for the trade stream.
- `intake`, `dispatcher`, `viewmodel`: the frame intake and drain-and-render path.
- `alerts`: volume threshold alerting and notifier backends.
- `session`: the lifecycle object wiring all of the above together.
- `ui`: the PySide6/pyqtgraph window.
"""

import importlib.metadata

try:
    __version__: str = importlib.metadata.version("tradewatch")
except importlib.metadata.PackageNotFoundError:
    # Running from a source checkout without an install.
    __version__ = "0.0.0-dev"
