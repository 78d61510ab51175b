from dataclasses import dataclass, field, is_dataclass
from pathlib import Path
import sys
import tomllib
from typing import Any, ClassVar, TypeVar

from loguru import logger

from tradewatch.feed import BINANCE_TRADE_STREAM_URL

# --- Constants ---
APP_NAME = "tradewatch"
# Use a platform-agnostic user config directory
if sys.platform == "win32":
    CONFIG_DIR = Path.home() / "AppData" / "Roaming" / APP_NAME
else:
    CONFIG_DIR = Path.home() / ".config" / APP_NAME

CONFIG_FILE = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG_TEXT = """\
# TradeWatch Configuration File
# Uncomment and edit any value to override the default.

# [general]
# log_level_console = "INFO"
# log_level_file = "DEBUG"
# Defaults to the "logs" folder next to this file. An empty string disables file logging.
# log_directory = ""

# [feed]
# url = "wss://stream.binance.com:9443/ws/btcusdt@trade"
# symbol_label = "BTC/USDT"
# Keys of the price and quantity values in each trade frame.
# price_field = "p"
# quantity_field = "q"

# [pipeline]
# queue_capacity = 1000
# drain_interval_sec = 1.0

# [alerts]
# volume_threshold = 95.0
# channel_id = "trades_channel"
# channel_name = "Trades Notifications"
"""

# --- Dataclass Models for Settings ---
T = TypeVar("T")


@dataclass
class GeneralSettings:
    """General application settings."""

    log_level_console: str = "INFO"
    log_level_file: str = "DEBUG"
    log_directory: str = str(CONFIG_DIR / "logs")


@dataclass
class FeedSettings:
    """Settings for the trade stream connection."""

    url: str = BINANCE_TRADE_STREAM_URL
    symbol_label: str = "BTC/USDT"
    # Binance trade payload keys.
    price_field: str = "p"
    quantity_field: str = "q"


@dataclass
class PipelineSettings:
    """Settings for the frame intake and the drain timer."""

    queue_capacity: int = 1000
    drain_interval_sec: float = 1.0


@dataclass
class AlertSettings:
    """Settings for large-trade alerts."""

    volume_threshold: float = 95.0
    channel_id: str = "trades_channel"
    channel_name: str = "Trades Notifications"


@dataclass
class Settings:
    """Root container for all application settings."""

    general: GeneralSettings = field(default_factory=GeneralSettings)
    feed: FeedSettings = field(default_factory=FeedSettings)
    pipeline: PipelineSettings = field(default_factory=PipelineSettings)
    alerts: AlertSettings = field(default_factory=AlertSettings)

    _instance: ClassVar["Settings | None"] = None

    @classmethod
    def get_instance(cls) -> "Settings":
        """Returns the singleton instance of the Settings object."""
        if cls._instance is None:
            cls._instance = load_config()
        return cls._instance


def _update_dataclass(dc_instance: T, data: dict[str, Any]) -> T:
    """Recursively updates a dataclass instance from a dictionary."""
    for f in field_names(dc_instance):
        if f in data:
            field_value = getattr(dc_instance, f)
            if is_dataclass(field_value):
                if isinstance(data[f], dict):
                    _update_dataclass(field_value, data[f])
                else:
                    logger.warning(f"Ignoring non-table value for section '{f}'.")
            else:
                setattr(dc_instance, f, data[f])
    return dc_instance


def field_names(dc_instance: Any) -> list[str]:
    """Helper to get field names from a dataclass instance."""
    return [f.name for f in dc_instance.__dataclass_fields__.values()]


def load_config(path: Path = CONFIG_FILE) -> Settings:
    """Loads settings from a TOML file, merging them with defaults.

    If the config file does not exist, it creates a commented template.

    Args:
        path: The path to the configuration file.

    Returns:
        A populated Settings object.
    """
    settings_obj = Settings()
    logger.info(f"Loading configuration from '{path}'...")

    if not path.exists():
        logger.warning(f"Configuration file not found. Creating default at '{path}'.")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                f.write(DEFAULT_CONFIG_TEXT)
        except OSError as e:
            logger.error(f"Failed to create default config file: {e}")
        return settings_obj

    try:
        with path.open("rb") as f:
            user_config = tomllib.load(f)
        _update_dataclass(settings_obj, user_config)
        logger.success("Successfully loaded user configuration.")
    except tomllib.TOMLDecodeError as e:
        logger.error(f"Error decoding TOML from '{path}': {e}")
        logger.warning("Using default settings due to configuration error.")
        settings_obj = Settings()
    except OSError as e:
        logger.error(f"Could not read configuration file '{path}': {e}")
        logger.warning("Using default settings due to configuration error.")
        settings_obj = Settings()

    return settings_obj


# --- Global Singleton Instance ---
# Other modules can simply `from tradewatch.config import settings`
settings = Settings.get_instance()
