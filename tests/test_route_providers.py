import pytest
import requests

from routing import google_directions_client, osrm_client
from routing.google_directions_client import GoogleDirectionsClient
from routing.models import Coordinate
from routing.osrm_client import OSRMClient
from routing.provider import ProviderRoute, RouteProviderError
from routing.route_service import compute_route

ORIGIN = Coordinate(46.8139, -71.2082)
DESTINATION = Coordinate(46.8, -71.2)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, json_error=None):
        self.payload = payload
        self.status_code = status_code
        self.json_error = json_error

    def json(self):
        if self.json_error is not None:
            raise self.json_error
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


@pytest.fixture
def fake_get(monkeypatch):
    """
    Replaces requests.get and records every call.
    Set fake_get.response (or fake_get.error) before calling the client.
    """
    class _FakeGet:
        response = FakeResponse({})
        error = None
        calls = []

        def __call__(self, url, params=None, timeout=None):
            self.calls.append({"url": url, "params": params, "timeout": timeout})
            if self.error is not None:
                raise self.error
            return self.response

    getter = _FakeGet()
    getter.calls = []
    monkeypatch.setattr(requests, "get", getter)
    return getter


# ---------------------------------------------------------------------------
# OSRM
# ---------------------------------------------------------------------------

def test_osrm_requires_base_url(monkeypatch):
    monkeypatch.setattr(osrm_client, "BASE_URL", None)
    with pytest.raises(ValueError):
        OSRMClient()


def test_osrm_returns_route_geometry(fake_get):
    fake_get.response = FakeResponse({
        "code": "Ok",
        "routes": [{"geometry": "_p~iF~ps|U_ulLnnqC", "distance": 1200.0, "duration": 180.0}],
    })
    client = OSRMClient(base_url="http://osrm.test", timeout=3)

    assert client.fetch_route(ORIGIN, DESTINATION) == ProviderRoute(
        encoded="_p~iF~ps|U_ulLnnqC", duration_s=180.0, distance_m=1200.0,
    )

    call = fake_get.calls[0]
    # OSRM wants lon,lat
    assert call["url"] == "http://osrm.test/route/v1/driving/-71.2082,46.8139;-71.2,46.8"
    assert call["params"] == {"overview": "full", "geometries": "polyline"}
    assert call["timeout"] == 3


def test_osrm_error_code_raises_provider_error(fake_get):
    fake_get.response = FakeResponse({"code": "NoRoute", "message": "Impossible route"})
    client = OSRMClient(base_url="http://osrm.test")

    with pytest.raises(RouteProviderError) as excinfo:
        client.fetch_route(ORIGIN, DESTINATION)
    assert excinfo.value.status == "NoRoute"


def test_osrm_network_failure_raises_provider_error(fake_get):
    fake_get.error = requests.ConnectionError("refused")
    client = OSRMClient(base_url="http://osrm.test")

    with pytest.raises(RouteProviderError):
        client.fetch_route(ORIGIN, DESTINATION)


def test_osrm_missing_geometry_raises_provider_error(fake_get):
    fake_get.response = FakeResponse({"code": "Ok", "routes": []})
    client = OSRMClient(base_url="http://osrm.test")

    with pytest.raises(RouteProviderError):
        client.fetch_route(ORIGIN, DESTINATION)


# ---------------------------------------------------------------------------
# Google Directions
# ---------------------------------------------------------------------------

def test_google_requires_api_key(monkeypatch):
    monkeypatch.setattr(google_directions_client, "API_KEY", None)
    with pytest.raises(ValueError):
        GoogleDirectionsClient()


def test_google_returns_overview_polyline(fake_get):
    fake_get.response = FakeResponse({
        "status": "OK",
        "routes": [{
            "overview_polyline": {"points": "_p~iF~ps|U"},
            "legs": [{"duration": {"value": 540, "text": "9 mins"}, "distance": {"value": 3100, "text": "3.1 km"}}],
        }],
    })
    client = GoogleDirectionsClient(api_key="test-key", url="https://directions.test/json")

    assert client.fetch_route(ORIGIN, DESTINATION) == ProviderRoute(
        encoded="_p~iF~ps|U", duration_s=540.0, distance_m=3100.0,
    )

    call = fake_get.calls[0]
    assert call["url"] == "https://directions.test/json"
    assert call["params"] == {
        "origin": "46.8139,-71.2082",
        "destination": "46.8,-71.2",
        "key": "test-key",
    }


@pytest.mark.parametrize("status", ["OVER_QUERY_LIMIT", "ZERO_RESULTS", "REQUEST_DENIED", "INVALID_REQUEST"])
def test_google_non_ok_status_raises_provider_error(fake_get, status):
    fake_get.response = FakeResponse({"status": status, "routes": []})
    client = GoogleDirectionsClient(api_key="test-key")

    with pytest.raises(RouteProviderError) as excinfo:
        client.fetch_route(ORIGIN, DESTINATION)
    assert excinfo.value.status == status


def test_google_http_error_raises_provider_error(fake_get):
    fake_get.response = FakeResponse({"status": "OK"}, status_code=503)
    client = GoogleDirectionsClient(api_key="test-key")

    with pytest.raises(RouteProviderError):
        client.fetch_route(ORIGIN, DESTINATION)


def test_google_malformed_json_raises_provider_error(fake_get):
    fake_get.response = FakeResponse(json_error=ValueError("Expecting value"))
    client = GoogleDirectionsClient(api_key="test-key")

    with pytest.raises(RouteProviderError):
        client.fetch_route(ORIGIN, DESTINATION)


def test_google_ok_without_routes_raises_provider_error(fake_get):
    fake_get.response = FakeResponse({"status": "OK", "routes": []})
    client = GoogleDirectionsClient(api_key="test-key")

    with pytest.raises(RouteProviderError):
        client.fetch_route(ORIGIN, DESTINATION)


def test_google_without_legs_has_no_duration(fake_get):
    fake_get.response = FakeResponse({
        "status": "OK",
        "routes": [{"overview_polyline": {"points": "_p~iF~ps|U"}}],
    })
    client = GoogleDirectionsClient(api_key="test-key")

    route = client.fetch_route(ORIGIN, DESTINATION)

    assert route.encoded == "_p~iF~ps|U"
    assert route.duration_s is None
    assert route.distance_m is None


def test_osrm_without_duration_has_no_duration(fake_get):
    fake_get.response = FakeResponse({"code": "Ok", "routes": [{"geometry": "_p~iF~ps|U"}]})
    client = OSRMClient(base_url="http://osrm.test")

    route = client.fetch_route(ORIGIN, DESTINATION)

    assert route.duration_s is None


# ---------------------------------------------------------------------------
# Missing or non-string geometry
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("points", [None, 12345, "", ["_p~iF"]])
def test_google_non_string_polyline_raises_provider_error(fake_get, points):
    fake_get.response = FakeResponse({"status": "OK", "routes": [{"overview_polyline": {"points": points}}]})
    client = GoogleDirectionsClient(api_key="test-key")

    with pytest.raises(RouteProviderError) as excinfo:
        client.fetch_route(ORIGIN, DESTINATION)
    assert excinfo.value.status == "OK"


@pytest.mark.parametrize("geometry", [None, 12345, "", {"type": "LineString"}])
def test_osrm_non_string_geometry_raises_provider_error(fake_get, geometry):
    fake_get.response = FakeResponse({"code": "Ok", "routes": [{"geometry": geometry}]})
    client = OSRMClient(base_url="http://osrm.test")

    with pytest.raises(RouteProviderError) as excinfo:
        client.fetch_route(ORIGIN, DESTINATION)
    assert excinfo.value.status == "Ok"


def test_google_null_polyline_falls_back_to_straight_line(fake_get):
    fake_get.response = FakeResponse({"status": "OK", "routes": [{"overview_polyline": {"points": None}}]})

    result = compute_route(GoogleDirectionsClient(api_key="test-key"), ORIGIN, DESTINATION)

    assert result.is_fallback is True
    assert result.coordinates == (ORIGIN, DESTINATION)
    assert result.duration_s is None


def test_osrm_null_geometry_falls_back_to_straight_line(fake_get):
    fake_get.response = FakeResponse({"code": "Ok", "routes": [{"geometry": None, "duration": 90.0}]})

    result = compute_route(OSRMClient(base_url="http://osrm.test"), ORIGIN, DESTINATION)

    assert result.is_fallback is True
    assert result.coordinates == (ORIGIN, DESTINATION)
    assert result.duration_s is None


def test_google_route_duration_reaches_route_result(fake_get):
    fake_get.response = FakeResponse({
        "status": "OK",
        "routes": [{
            "overview_polyline": {"points": "_p~iF~ps|U_ulLnnqC"},
            "legs": [{"duration": {"value": 600}, "distance": {"value": 4200}}],
        }],
    })

    result = compute_route(GoogleDirectionsClient(api_key="test-key"), ORIGIN, DESTINATION)

    assert result.is_fallback is False
    assert result.duration_s == 600.0
