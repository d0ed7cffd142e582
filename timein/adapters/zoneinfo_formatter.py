"""
TimeFormatter rendering "now" with the standard zoneinfo database.

    Asia/Bangkok - Fri, May 2, 9:30 AM

Day and month names are always English; the output does not follow LC_TIME.
"""

from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timein.domain.lookup import InvalidTimezoneError, TimeFormatter

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def load_zone(timezone_id: str) -> ZoneInfo:
    name = (timezone_id or "").strip()
    if not name:
        raise InvalidTimezoneError("Timezone required")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidTimezoneError(f"Invalid timezone: {name}") from exc


def format_clock(moment: datetime) -> str:
    """Short, 12-hour clock: "Fri, May 2, 9:30 AM"."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    weekday = _WEEKDAYS[moment.weekday()]
    month = _MONTHS[moment.month - 1]
    return f"{weekday}, {month} {moment.day}, {hour}:{moment.minute:02d} {suffix}"


class ZoneInfoFormatter(TimeFormatter):

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def now_in(self, timezone_id: str) -> datetime:
        return self._clock().astimezone(load_zone(timezone_id))

    def format(self, timezone_id: str) -> str:
        now = self.now_in(timezone_id)
        return f"{timezone_id.strip()} - {format_clock(now)}"

    def abbreviation(self, timezone_id: str) -> str:
        """Zone abbreviation in effect right now, e.g. "EDT" or "+07"."""
        return self.now_in(timezone_id).tzname() or ""
