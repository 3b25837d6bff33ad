"""Time buckets for the daily grid.

All values are local wall-clock minutes since midnight. Timezone offsets on
incoming timestamps are ignored: the grid shows the time as written.
"""
import re
from datetime import datetime
from functools import lru_cache
from typing import Tuple, Union

from salon_schedule import config

MINUTES_PER_DAY = 24 * 60

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


class GridConfigurationError(ValueError):
    """Raised when the grid window or slot size is invalid."""
    pass


@lru_cache(maxsize=64)
def build_time_grid(
    start_minute: int,
    end_minute_exclusive: int,
    slot_size_minutes: int
) -> Tuple[int, ...]:
    """
    Generate the ordered bucket starts of a business-day window.

    Args:
        start_minute: First bucket (minutes since midnight)
        end_minute_exclusive: Window end, no bucket starts at or after it
        slot_size_minutes: Bucket width

    Returns:
        Tuple of bucket starts

    Raises:
        GridConfigurationError: If the window is inverted, out of the day,
            or the slot size is not positive

    Example:
        >>> build_time_grid(480, 600, 30)
        (480, 510, 540, 570)
    """
    if slot_size_minutes <= 0:
        raise GridConfigurationError(
            f"slot_size_minutes must be positive, got {slot_size_minutes}"
        )
    if not 0 <= start_minute < end_minute_exclusive <= MINUTES_PER_DAY:
        raise GridConfigurationError(
            f"Invalid grid window {start_minute}-{end_minute_exclusive}"
        )
    return tuple(range(start_minute, end_minute_exclusive, slot_size_minutes))


def format_minutes(minute: int) -> str:
    """Format minutes since midnight as HH:MM."""
    return f"{minute // 60:02d}:{minute % 60:02d}"


def parse_hhmm(value: str) -> int:
    """
    Parse a wall-clock "HH:MM" value into minutes since midnight.

    Raises:
        ValueError: If the value is not a valid time of day
    """
    match = _HHMM_RE.match(value.strip()) if value else None
    if not match:
        raise ValueError(f"Invalid time value: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time value: {value!r}")
    return hours * 60 + minutes


def parse_wall_clock(value: Union[str, datetime]) -> datetime:
    """
    Parse a transport timestamp into a naive wall-clock datetime.

    Accepts "YYYY-MM-DD HH:mm", ISO-8601 (with or without offset / "Z")
    or a datetime. Any tzinfo is dropped without conversion.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    parsed = datetime.fromisoformat(value.strip())
    return parsed.replace(tzinfo=None)


def minutes_since_midnight(value: Union[str, datetime]) -> int:
    """Wall-clock minutes since midnight of a timestamp."""
    moment = parse_wall_clock(value)
    return moment.hour * 60 + moment.minute


def snap_to_grid(hhmm: str, step_minutes: int = config.SNAP_STEP_MINUTES, direction: str = "nearest") -> str:
    """
    Align a wall-clock value to the booking step.

    Args:
        hhmm: Time to align
        step_minutes: Step size (default 15)
        direction: "nearest" (ties round up), "up" or "down"

    Returns:
        Aligned HH:MM, wrapped to the same 24h clock

    Example:
        >>> snap_to_grid("09:07")
        '09:00'
        >>> snap_to_grid("23:53")
        '00:00'
    """
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")
    if direction not in ("nearest", "up", "down"):
        raise ValueError(f"Unknown snap direction: {direction}")

    total = parse_hhmm(hhmm)
    remainder = total % step_minutes
    if remainder:
        down = total - remainder
        up = down + step_minutes
        if direction == "down":
            total = down
        elif direction == "up":
            total = up
        else:
            total = down if (total - down) < (up - total) else up

    return format_minutes(total % MINUTES_PER_DAY)
