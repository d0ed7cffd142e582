"""
TimezoneProvider backed by the offline `timezonefinder` polygon data.

The finder is built on first lookup, so runs answered from the cache never
pay for loading the boundary data.
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timezonefinder import TimezoneFinder

from timein.domain.lookup import Coordinates, NotFoundError, TimezoneProvider


class TimezoneFinderProvider(TimezoneProvider):

    def __init__(self, finder: TimezoneFinder | None = None):
        self._finder = finder

    def _get_finder(self) -> TimezoneFinder:
        if self._finder is None:
            self._finder = TimezoneFinder()
        return self._finder

    def lookup(self, latitude: float, longitude: float) -> str:
        try:
            coords = Coordinates(float(latitude), float(longitude))
        except (TypeError, ValueError) as exc:
            raise NotFoundError(f"Latitude and longitude required: {exc}") from exc

        finder = self._get_finder()
        name = finder.timezone_at(lng=coords.longitude, lat=coords.latitude)
        if not name:
            name = finder.certain_timezone_at(lng=coords.longitude, lat=coords.latitude)
        if not name:
            raise NotFoundError(
                f"no timezone found for coordinates: {coords.latitude}, {coords.longitude}"
            )

        name = str(name).strip()
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise NotFoundError(f"unknown timezone {name!r} for coordinates") from exc
        return name
