import json
import math
from typing import Any

# Binance trade payload keys.
PRICE_FIELD = "p"
QUANTITY_FIELD = "q"


class FrameParseError(ValueError):
    """Raised when a numeric field cannot be extracted from a frame."""

    def __init__(self, frame: str, field: str, reason: str) -> None:
        self.frame = frame
        self.field = field
        self.reason = reason
        super().__init__(f"Cannot read '{field}' from frame: {reason}")


def _to_float(value: Any) -> float:
    # bool is an int subclass; a JSON true/false is not a number here.
    if isinstance(value, bool):
        err_msg = f"expected a number, got {type(value).__name__}"
        raise TypeError(err_msg)
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        # float() also takes Python literal forms such as "1_000".
        if "_" in value:
            err_msg = f"not a decimal number: {value!r}"
            raise ValueError(err_msg)
        return float(value.strip())
    err_msg = f"expected a number, got {type(value).__name__}"
    raise TypeError(err_msg)


def parse_numeric_field(frame: str, field: str) -> float:
    """Extracts a finite numeric value from a JSON text frame.

    The value may be a JSON number or a numeric string, as Binance encodes
    prices and quantities as strings.

    Args:
        frame: The raw text frame.
        field: The top-level key to read.

    Returns:
        The value as a float.

    Raises:
        FrameParseError: If the frame is not a JSON object, the field is
            missing, or the value is not a finite number.
    """
    try:
        payload = json.loads(frame)
    except (ValueError, TypeError) as e:
        raise FrameParseError(frame, field, f"invalid JSON ({e})") from e

    if not isinstance(payload, dict):
        raise FrameParseError(frame, field, "not a JSON object")
    if field not in payload:
        raise FrameParseError(frame, field, "field is missing")

    try:
        value = _to_float(payload[field])
    except (TypeError, ValueError, OverflowError) as e:
        raise FrameParseError(frame, field, str(e)) from e

    if not math.isfinite(value):
        raise FrameParseError(frame, field, "value is not finite")
    return value


def parse_price(frame: str, field: str = PRICE_FIELD) -> float:
    """Returns the trade price carried by a frame."""
    return parse_numeric_field(frame, field)


def parse_quantity(frame: str, field: str = QUANTITY_FIELD) -> float:
    """Returns the trade quantity carried by a frame."""
    return parse_numeric_field(frame, field)
