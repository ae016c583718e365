"""
Time range parsing for searches.

The resulting TimeRange is applied unchanged to every vector store call
at every layer of an expansion.
"""

from datetime import datetime, timezone
from typing import Optional, Union

from ..errors import ConfigError
from ..memory.base import TimeRange, to_millis

DATETIME_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%d")

TimeBound = Union[str, int, datetime, None]


def parse_datetime(value: str) -> int:
    """
    Parse a user supplied bound into a UTC millisecond epoch.

    Accepts "YYYY-MM-DD" (midnight) or "YYYY-MM-DD HH:MM".
    """
    text = value.strip()
    for fmt in DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return to_millis(parsed.replace(tzinfo=timezone.utc))

    raise ConfigError(
        f"Invalid date format: {value!r}. Use YYYY-MM-DD or YYYY-MM-DD HH:MM"
    )


def _to_bound(value: TimeBound) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_millis(value)
    if isinstance(value, bool):
        raise ConfigError(f"Invalid time bound: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return parse_datetime(value)
    raise ConfigError(f"Invalid time bound: {value!r}")


def build_time_range(after: TimeBound = None, before: TimeBound = None) -> Optional[TimeRange]:
    """
    Build an inclusive TimeRange, or None when neither bound is given.

    Raises:
        ConfigError: If a bound is malformed or after is later than before.
    """
    after_ms = _to_bound(after)
    before_ms = _to_bound(before)

    if after_ms is None and before_ms is None:
        return None

    if after_ms is not None and before_ms is not None and after_ms > before_ms:
        raise ConfigError("--after must not be later than --before")

    return TimeRange(after=after_ms, before=before_ms)
