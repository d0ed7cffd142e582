"""
NominatimGeocoder response handling, without the network.

A tiny fake session stands in for requests.Session; it records the request
and returns a canned JSON body.
"""

import pytest
import requests

from timein.adapters.nominatim_geocoder import NOMINATIM_URL, NominatimGeocoder
from timein.domain.lookup import Coordinates, NotFoundError


class FakeResponse:

    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:

    def __init__(self, response: FakeResponse):
        self.headers: dict[str, str] = {}
        self.requests: list[tuple[str, dict, float]] = []
        self._response = response

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params, timeout))
        return self._response


def _geocoder(payload, status_code=200, **kwargs):
    session = FakeSession(FakeResponse(payload, status_code))
    return NominatimGeocoder(session=session, **kwargs), session


def test_first_result_is_used():
    geo, _ = _geocoder([
        {"lat": "13.7524938", "lon": "100.4935089", "display_name": "Bangkok, Thailand"},
        {"lat": "0", "lon": "0", "display_name": "Somewhere else"},
    ])
    coords = geo.geocode("Bangkok")
    assert coords == Coordinates(13.7524938, 100.4935089)


def test_request_shape():
    geo, session = _geocoder([{"lat": "1", "lon": "2"}], timeout=3.5)
    geo.geocode("Bangkok")

    url, params, timeout = session.requests[0]
    assert url == NOMINATIM_URL
    assert params == {"q": "Bangkok", "format": "json", "limit": 1}
    assert timeout == 3.5


def test_user_agent_header_is_set():
    geo, session = _geocoder([], user_agent="my-app/2.0 (me@example.com)")
    assert session.headers["User-Agent"] == "my-app/2.0 (me@example.com)"


def test_empty_result_raises_not_found():
    geo, _ = _geocoder([])
    with pytest.raises(NotFoundError, match="no results found for: Nowhereville"):
        geo.geocode("Nowhereville")


def test_malformed_coordinates_raise_not_found():
    geo, _ = _geocoder([{"lat": "north", "lon": "100.5"}])
    with pytest.raises(NotFoundError, match="Invalid coordinates"):
        geo.geocode("Bangkok")


def test_out_of_range_coordinates_raise_not_found():
    geo, _ = _geocoder([{"lat": "95.0", "lon": "100.5"}])
    with pytest.raises(NotFoundError):
        geo.geocode("Bangkok")


def test_blank_query_is_rejected_without_request():
    geo, session = _geocoder([])
    with pytest.raises(NotFoundError):
        geo.geocode("   ")
    assert session.requests == []


def test_http_errors_propagate():
    geo, _ = _geocoder({"error": "rate limited"}, status_code=429)
    with pytest.raises(requests.HTTPError):
        geo.geocode("Bangkok")
