import time

# Alert ids are signed 32-bit integers derived from the wall clock.
_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN_BIT = 0x80000000


def get_current_ms() -> int:
    """Returns the current time as milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def to_int32(value: int) -> int:
    """Truncates an integer to its low 32 bits, interpreted as signed."""
    value &= _INT32_MASK
    if value & _INT32_SIGN_BIT:
        value -= 1 << 32
    return value


def alert_id_from_clock() -> int:
    """Returns an alert identifier derived from the current wall-clock time.

    Two alerts raised within the same millisecond share an id, so the
    platform may replace one with the other.
    """
    return to_int32(get_current_ms())
