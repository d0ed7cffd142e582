"""
In-memory fakes for the lookup ports. No network, no polygon data.

Test helpers:
    SimulatorGeocoder.inject_place()           : register a place name
    SimulatorTimezoneProvider.inject_zone()    : register coordinates
    calls                                      : every query received, in order
"""

from timein.domain.lookup import (
    Coordinates,
    GeocodeProvider,
    NotFoundError,
    TimezoneProvider,
)


class SimulatorGeocoder(GeocodeProvider):

    def __init__(self):
        self._places: dict[str, Coordinates] = {}
        self.calls: list[str] = []

    def inject_place(self, name: str, latitude: float, longitude: float) -> None:
        self._places[name.strip().casefold()] = Coordinates(latitude, longitude)

    def geocode(self, city: str) -> Coordinates:
        self.calls.append(city)
        coords = self._places.get(city.strip().casefold())
        if coords is None:
            raise NotFoundError(f"no results found for: {city}")
        return coords


class SimulatorTimezoneProvider(TimezoneProvider):

    def __init__(self):
        self._zones: dict[tuple[float, float], str] = {}
        self.calls: list[tuple[float, float]] = []

    def inject_zone(self, latitude: float, longitude: float, timezone_id: str) -> None:
        self._zones[(latitude, longitude)] = timezone_id

    def lookup(self, latitude: float, longitude: float) -> str:
        self.calls.append((latitude, longitude))
        tz = self._zones.get((latitude, longitude))
        if tz is None:
            raise NotFoundError(
                f"no timezone found for coordinates: {latitude}, {longitude}"
            )
        return tz
