import httpx
import pytest

from app.services.routing_providers import (
    GraphHopperRouteProvider,
    MapboxRouteProvider,
    OSRMRouteProvider,
    RouteProviderError,
    build_route_providers,
)
from core.settings import Settings
from tests.utils.factories import RIO, SAO_PAULO

GEOMETRY = [[-43.1729, -22.9068], [-44.5, -23.1], [-46.6333, -23.5505]]


def _json_response(payload) -> httpx.Response:
    # Raw text lets NaN/Infinity literals through, which httpx refuses to encode
    if isinstance(payload, str):
        return httpx.Response(
            200, content=payload.encode(), headers={"content-type": "application/json"}
        )
    return httpx.Response(200, json=payload)


def _transport(handler):
    seen: list[httpx.Request] = []

    def _wrapped(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    return httpx.MockTransport(_wrapped), seen


@pytest.mark.asyncio
async def test_osrm_parses_geojson_route():
    transport, seen = _transport(
        lambda r: httpx.Response(
            200,
            json={
                "code": "Ok",
                "routes": [
                    {"distance": 430000, "duration": 21600, "geometry": {"coordinates": GEOMETRY}}
                ],
            },
        )
    )
    provider = OSRMRouteProvider("https://osrm.test", transport=transport)

    result = await provider.route(RIO, SAO_PAULO)

    assert result.provider_name == "OSRM"
    assert result.total_distance_meters == 430000
    assert result.total_duration_seconds == 21600
    assert result.path[0].latitude == pytest.approx(-22.9068)
    assert result.path[0].longitude == pytest.approx(-43.1729)
    assert len(result.path) == 3
    url = seen[0].url
    assert url.path == "/route/v1/driving/-43.1729,-22.9068;-46.6333,-23.5505"
    assert url.params["geometries"] == "geojson"
    assert url.params["overview"] == "full"


@pytest.mark.asyncio
async def test_osrm_error_code_is_a_failure():
    transport, _ = _transport(
        lambda r: httpx.Response(200, json={"code": "NoRoute", "message": "Impossible route"})
    )
    with pytest.raises(RouteProviderError, match="Impossible route"):
        await OSRMRouteProvider("https://osrm.test", transport=transport).route(RIO, SAO_PAULO)


@pytest.mark.asyncio
async def test_osrm_missing_routes_is_a_failure():
    transport, _ = _transport(lambda r: httpx.Response(200, json={"code": "Ok", "routes": []}))
    with pytest.raises(RouteProviderError):
        await OSRMRouteProvider("https://osrm.test", transport=transport).route(RIO, SAO_PAULO)


@pytest.mark.asyncio
async def test_timeout_is_a_failure():
    def _timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    transport, _ = _transport(_timeout)
    with pytest.raises(RouteProviderError, match="timed out"):
        await OSRMRouteProvider("https://osrm.test", transport=transport).route(RIO, SAO_PAULO)


@pytest.mark.asyncio
async def test_non_success_status_is_a_failure():
    transport, _ = _transport(lambda r: httpx.Response(502, text="bad gateway"))
    with pytest.raises(RouteProviderError, match="HTTP 502"):
        await OSRMRouteProvider("https://osrm.test", transport=transport).route(RIO, SAO_PAULO)


@pytest.mark.asyncio
async def test_empty_geometry_is_a_failure():
    transport, _ = _transport(
        lambda r: httpx.Response(
            200,
            json={"code": "Ok", "routes": [{"distance": 1, "duration": 1, "geometry": {"coordinates": []}}]},
        )
    )
    with pytest.raises(RouteProviderError, match="empty"):
        await OSRMRouteProvider("https://osrm.test", transport=transport).route(RIO, SAO_PAULO)


@pytest.mark.asyncio
async def test_graphhopper_converts_milliseconds_and_sends_lat_lon_points():
    transport, seen = _transport(
        lambda r: httpx.Response(
            200,
            json={"paths": [{"distance": 430000, "time": 21600000, "points": {"coordinates": GEOMETRY}}]},
        )
    )
    provider = GraphHopperRouteProvider("https://gh.test/api/1", api_key="secret", transport=transport)

    result = await provider.route(RIO, SAO_PAULO)

    assert result.provider_name == "GraphHopper"
    assert result.total_duration_seconds == 21600
    params = seen[0].url.params
    assert params.get_list("point") == ["-22.9068,-43.1729", "-23.5505,-46.6333"]
    assert params["points_encoded"] == "false"
    assert params["key"] == "secret"


@pytest.mark.asyncio
async def test_mapbox_parses_route_and_sends_token():
    transport, seen = _transport(
        lambda r: httpx.Response(
            200,
            json={"routes": [{"distance": 431000, "duration": 21000, "geometry": {"coordinates": GEOMETRY}}]},
        )
    )
    provider = MapboxRouteProvider("https://mapbox.test", access_token="pk.token", transport=transport)

    result = await provider.route(RIO, SAO_PAULO)

    assert result.provider_name == "Mapbox"
    assert result.total_distance_meters == 431000
    assert seen[0].url.path.startswith("/directions/v5/mapbox/driving/")
    assert seen[0].url.params["access_token"] == "pk.token"


@pytest.mark.parametrize("key", [None, "", "YOUR_KEY_HERE", "SUA_CHAVE_GRAPHHOPPER_AQUI"])
def test_missing_or_placeholder_credentials_are_not_configured(key):
    assert not GraphHopperRouteProvider("https://gh.test", api_key=key).is_configured
    assert not MapboxRouteProvider("https://mapbox.test", access_token=key).is_configured


def test_real_credentials_are_configured():
    assert GraphHopperRouteProvider("https://gh.test", api_key="abc123").is_configured
    assert OSRMRouteProvider("https://osrm.test").is_configured


def test_build_route_providers_follows_configured_order():
    settings = Settings(route_providers=["mapbox", "osrm"])
    providers = build_route_providers(settings)
    assert [p.name for p in providers] == ["Mapbox", "OSRM"]


def test_build_route_providers_default_order():
    settings = Settings(route_providers=["osrm", "graphhopper", "mapbox"])
    assert [p.name for p in build_route_providers(settings)] == ["OSRM", "GraphHopper", "Mapbox"]


def test_build_route_providers_rejects_unknown_names():
    with pytest.raises(ValueError):
        build_route_providers(Settings(route_providers=["here"]))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"code": "Ok", "routes": [["not-a-dict"]]},
        {"code": "Ok", "routes": [{"distance": 1, "duration": 1, "geometry": ["x"]}]},
        {"code": "Ok", "routes": {"a": 1}},
        {"code": "Ok", "routes": [{"distance": 1, "duration": 1, "geometry": {"coordinates": "abc"}}]},
        {"code": "Ok", "routes": [{"distance": 1, "duration": 1, "geometry": {"coordinates": [["x", "y"]]}}]},
        {"code": "Ok", "routes": [{"distance": "far", "duration": 1, "geometry": {"coordinates": GEOMETRY}}]},
        '{"code": "Ok", "routes": [{"distance": NaN, "duration": 1, "geometry": {"coordinates": [[-43.1, -22.9]]}}]}',
        {"code": "Ok", "routes": [{"distance": 1, "duration": -5, "geometry": {"coordinates": GEOMETRY}}]},
    ],
)
async def test_osrm_malformed_route_data_is_a_failure(payload):
    transport, _ = _transport(lambda r: _json_response(payload))
    with pytest.raises(RouteProviderError):
        await OSRMRouteProvider("https://osrm.test", transport=transport).route(RIO, SAO_PAULO)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"paths": {"time": 1}},
        {"paths": ["not-a-dict"]},
        {"paths": [{"distance": 1, "time": 1000, "points": ["x"]}]},
        {"paths": [{"distance": 1, "time": "soon", "points": {"coordinates": GEOMETRY}}]},
    ],
)
async def test_graphhopper_malformed_route_data_is_a_failure(payload):
    transport, _ = _transport(lambda r: _json_response(payload))
    provider = GraphHopperRouteProvider("https://gh.test", api_key="secret", transport=transport)
    with pytest.raises(RouteProviderError):
        await provider.route(RIO, SAO_PAULO)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"routes": "none"},
        {"routes": [None]},
        {"routes": [{"distance": 1, "duration": 1, "geometry": "LINESTRING"}]},
        '{"routes": [{"distance": 1, "duration": Infinity, "geometry": {"coordinates": [[-43.1, -22.9]]}}]}',
    ],
)
async def test_mapbox_malformed_route_data_is_a_failure(payload):
    transport, _ = _transport(lambda r: _json_response(payload))
    provider = MapboxRouteProvider("https://mapbox.test", access_token="pk.token", transport=transport)
    with pytest.raises(RouteProviderError):
        await provider.route(RIO, SAO_PAULO)
