"""
Lookup ports: the external facts the resolver chains together.

  place name --GeocodeProvider--> Coordinates
  Coordinates --TimezoneProvider--> IANA timezone id
  timezone id --TimeFormatter--> display string for "now"

None of these hold state the resolver cares about; each is a single call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class NotFoundError(Exception):
    """The provider has no answer for the given input."""


class InvalidTimezoneError(Exception):
    """The timezone id is not a zone the formatter can render."""


@dataclass(frozen=True)
class Coordinates:
    latitude: float   # -90..90
    longitude: float  # -180..180

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"invalid latitude: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"invalid longitude: {self.longitude}")


class GeocodeProvider(ABC):
    """Port: resolve a free-text place name to coordinates."""

    @abstractmethod
    def geocode(self, city: str) -> Coordinates:
        """Return coordinates of the best match. Raises NotFoundError."""
        ...


class TimezoneProvider(ABC):
    """Port: resolve coordinates to an IANA timezone id."""

    @abstractmethod
    def lookup(self, latitude: float, longitude: float) -> str:
        """Return e.g. "Asia/Bangkok". Raises NotFoundError."""
        ...


class TimeFormatter(ABC):
    """Port: render the current instant in a timezone for display."""

    @abstractmethod
    def format(self, timezone_id: str) -> str:
        """Raises InvalidTimezoneError for unknown zones."""
        ...

    def abbreviation(self, timezone_id: str) -> str:
        """Short name of the zone right now ("EDT"), or "" if the formatter has none."""
        return ""


def city_from_timezone(timezone_id: str) -> str:
    """"America/New_York" -> "New York"; ids without a region are returned as-is."""
    parts = timezone_id.split("/")
    if len(parts) > 1:
        return parts[-1].replace("_", " ")
    return timezone_id
