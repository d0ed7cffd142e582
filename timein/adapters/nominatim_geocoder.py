import logging

import requests

from timein.domain.lookup import Coordinates, GeocodeProvider, NotFoundError

log = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_USER_AGENT = "timein/0.1"


class NominatimGeocoder(GeocodeProvider):
    """Adapter: OpenStreetMap Nominatim search API, first result wins."""

    def __init__(
        self,
        base_url: str = NOMINATIM_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self._base_url = base_url
        self._timeout = timeout
        self.session = session or requests.Session()
        # Nominatim's usage policy rejects requests without an identifying agent.
        self.session.headers.update(
            {
                "User-Agent": user_agent,
                "Accept": "application/json",
            }
        )

    def geocode(self, city: str) -> Coordinates:
        if not city or not city.strip():
            raise NotFoundError("City name required")

        resp = self.session.get(
            self._base_url,
            params={"q": city, "format": "json", "limit": 1},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        results = resp.json()

        if not results:
            raise NotFoundError(f"no results found for: {city}")

        first = results[0]
        log.debug("geocoded %r → %s", city, first.get("display_name", "?"))
        try:
            return Coordinates(
                latitude=float(first["lat"]),
                longitude=float(first["lon"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise NotFoundError(f"Invalid coordinates for: {city}") from exc
