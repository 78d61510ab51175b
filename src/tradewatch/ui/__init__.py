# src/tradewatch/ui/__init__.py
"""The PySide6 desktop front end: main window, chart view and tray alerts."""
