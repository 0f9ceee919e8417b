"""Unit conversions for time interval and bandwidth option values."""

import math
import re

from repoconf.errors import BadArgumentError, InvalidValueError

# Leading decimal number, read the same way regardless of locale
_NUMBER_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_WHOLE_NUMBER = re.compile(r"\s*[+-]?\d+", re.ASCII)

INTERVAL_UNITS = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 60 * 60 * 24,
}

BANDWIDTH_UNITS = {
    "k": 1024,
    "m": 1024 * 1024,
    "g": 1024 * 1024 * 1024,
}

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
UINT64_MAX = 2**64 - 1


def _split_number(value: str, what: str) -> tuple[int | float, str]:
    """Split a value into its numeric magnitude and the unit suffix after it.

    Whole numbers come back as int so large values keep every digit.
    """
    match = _NUMBER_PREFIX.match(value)
    if not match:
        raise InvalidValueError(f"Couldn't convert '{value}' to {what}", value=value)

    number = match.group()
    if _WHOLE_NUMBER.fullmatch(number):
        return int(number), value[match.end():]

    magnitude = float(number)
    if math.isinf(magnitude):
        raise InvalidValueError(f"Too big {what} value '{value}'", value=value)

    return magnitude, value[match.end():]


def _scale(magnitude: int | float, multiplier: int) -> int:
    """Multiply and truncate toward zero; raises OverflowError on infinity."""
    return int(magnitude * multiplier)


def convert_interval_to_seconds(value: str | None) -> int:
    """Convert a time interval such as "90", "2m", "1.5h" or "7d" to seconds.

    The unit suffix is optional and case-insensitive: s(econds), m(inutes),
    h(ours) or d(ays). Fractional results are truncated toward zero.

    Args:
        value: Interval text as written in a repo file.

    Returns:
        Number of seconds.

    Raises:
        BadArgumentError: If no value is given.
        InvalidValueError: If the text has no numeric prefix, an unknown
            unit, or does not fit a signed 64-bit integer.

    Examples:
        >>> convert_interval_to_seconds("2m")
        120
        >>> convert_interval_to_seconds("1d")
        86400
    """
    if value is None:
        raise BadArgumentError("No time interval value specified")

    magnitude, unit = _split_number(value, "time interval")

    multiplier = 1
    if unit:
        if len(unit) != 1 or unit.lower() not in INTERVAL_UNITS:
            raise InvalidValueError(
                f"Unknown time interval unit '{unit}'", value=value
            )
        multiplier = INTERVAL_UNITS[unit.lower()]

    try:
        seconds = _scale(magnitude, multiplier)
    except OverflowError as e:
        raise InvalidValueError(
            f"Too big time interval value '{value}'", value=value
        ) from e

    if not INT64_MIN <= seconds <= INT64_MAX:
        raise InvalidValueError(f"Too big time interval value '{value}'", value=value)

    return seconds


def convert_bandwidth_to_bytes(value: str | None) -> int:
    """Convert a bandwidth such as "2048", "100k" or "1.5M" to bytes.

    The unit suffix is optional and case-insensitive: k, m or g, each a
    power of 1024.

    Args:
        value: Bandwidth text as written in a repo file.

    Returns:
        Number of bytes.

    Raises:
        BadArgumentError: If no value is given.
        InvalidValueError: If the text has no numeric prefix, an unknown
            unit, is negative or does not fit an unsigned 64-bit integer.

    Examples:
        >>> convert_bandwidth_to_bytes("2k")
        2048
        >>> convert_bandwidth_to_bytes("1m")
        1048576
    """
    if value is None:
        raise BadArgumentError("No bandwidth value specified")

    magnitude, unit = _split_number(value, "number")

    multiplier = 1
    if unit:
        if len(unit) != 1 or unit.lower() not in BANDWIDTH_UNITS:
            raise InvalidValueError(f"Unknown unit '{unit}'", value=value)
        multiplier = BANDWIDTH_UNITS[unit.lower()]

    if magnitude < 0:
        raise InvalidValueError(
            f"Bytes value may not be negative '{value}'", value=value
        )

    try:
        nbytes = _scale(magnitude, multiplier)
    except OverflowError as e:
        raise InvalidValueError(f"Too big bandwidth value '{value}'", value=value) from e

    if nbytes > UINT64_MAX:
        raise InvalidValueError(f"Too big bandwidth value '{value}'", value=value)

    return nbytes
