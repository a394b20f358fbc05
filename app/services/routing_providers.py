from __future__ import annotations

"""Routing provider adapters.

Each adapter talks to one routing service over HTTP and translates its
response into the common :class:`RouteResult` shape. Adapters raise
:class:`RouteProviderError` for every failure mode (timeout, transport error,
non-2xx status, provider error code, missing or malformed route data) so the
cascade can treat them uniformly.
"""

import math
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from app.schemas.forecast import Coordinate, RouteResult
from core.settings import Settings


class RouteProviderError(RuntimeError):
    """Raised by an adapter when its provider could not produce a route."""


class RouteProvider(Protocol):
    name: str

    @property
    def is_configured(self) -> bool: ...

    async def route(self, origin: Coordinate, destination: Coordinate) -> RouteResult: ...


def _lon_lat(c: Coordinate) -> str:
    return f"{c.longitude},{c.latitude}"


def _lat_lon(c: Coordinate) -> str:
    return f"{c.latitude},{c.longitude}"


def _is_placeholder(secret: str | None) -> bool:
    # Example configs ship values like "YOUR_KEY_HERE"
    return not secret or secret.upper().endswith(("_HERE", "_AQUI"))


class _HttpRouteProvider:
    name = "base"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    async def _get_json(self, url: str, params: Any) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.get(url, params=params)
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException as exc:
            raise RouteProviderError(f"{self.name} timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise RouteProviderError(
                f"{self.name} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RouteProviderError(f"{self.name} request failed: {exc}") from exc
        except ValueError as exc:
            raise RouteProviderError(f"{self.name} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise RouteProviderError(f"{self.name} returned an unexpected payload")
        return data

    def _first(self, items: Any, what: str) -> dict[str, Any]:
        if not isinstance(items, list) or not items:
            raise RouteProviderError(f"{self.name} returned no {what}")
        first = items[0]
        if not isinstance(first, dict):
            raise RouteProviderError(f"{self.name} returned a malformed {what}")
        return first

    def _object(self, value: Any, what: str) -> dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise RouteProviderError(f"{self.name} returned a malformed {what}")
        return value

    def _build_result(
        self,
        coordinates: Any,
        distance: Any,
        duration: Any,
        *,
        duration_divisor: float = 1.0,
    ) -> RouteResult:
        if not isinstance(coordinates, list) or not coordinates:
            raise RouteProviderError(f"{self.name} returned an empty route geometry")
        try:
            path = [Coordinate.from_lon_lat(pair) for pair in coordinates]
            distance_m = float(distance)
            duration_s = float(duration) / duration_divisor
            if not (math.isfinite(distance_m) and math.isfinite(duration_s)):
                raise ValueError("non-finite distance/duration")
            if distance_m < 0 or duration_s < 0:
                raise ValueError("negative distance/duration")
            return RouteResult(
                path=path,
                total_distance_meters=distance_m,
                total_duration_seconds=duration_s,
                provider_name=self.name,
            )
        except (TypeError, ValueError, IndexError, KeyError, ValidationError) as exc:
            raise RouteProviderError(
                f"{self.name} returned malformed route data: {exc}"
            ) from exc


class OSRMRouteProvider(_HttpRouteProvider):
    """Public OSRM demo server (or a self-hosted OSRM)."""

    name = "OSRM"

    def __init__(self, base_url: str, *, profile: str = "driving", **kwargs: Any) -> None:
        super().__init__(base_url, **kwargs)
        self.profile = profile

    async def route(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        coords = f"{_lon_lat(origin)};{_lon_lat(destination)}"
        url = f"{self.base_url}/route/v1/{self.profile}/{coords}"
        data = await self._get_json(url, {"overview": "full", "geometries": "geojson"})

        if data.get("code") != "Ok":
            raise RouteProviderError(
                f"OSRM error: {data.get('message') or data.get('code') or 'unknown'}"
            )
        route = self._first(data.get("routes"), "route")
        geometry = self._object(route.get("geometry"), "geometry")
        return self._build_result(
            geometry.get("coordinates") or [], route.get("distance"), route.get("duration")
        )


class GraphHopperRouteProvider(_HttpRouteProvider):
    """GraphHopper Directions API; requires an API key."""

    name = "GraphHopper"

    def __init__(self, base_url: str, *, api_key: str | None, **kwargs: Any) -> None:
        super().__init__(base_url, **kwargs)
        self.api_key = api_key

    @property
    def is_configured(self) -> bool:
        return super().is_configured and not _is_placeholder(self.api_key)

    async def route(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        params: list[tuple[str, str]] = [
            ("point", _lat_lon(origin)),
            ("point", _lat_lon(destination)),
            ("profile", "car"),
            ("locale", "pt"),
            ("points_encoded", "false"),
            ("key", self.api_key or ""),
        ]
        data = await self._get_json(f"{self.base_url}/route", params)

        if not data.get("paths"):
            raise RouteProviderError(
                f"GraphHopper returned no paths: {data.get('message', 'unknown')}"
            )
        path = self._first(data.get("paths"), "path")
        time_ms = path.get("time")
        if time_ms is None:
            raise RouteProviderError("GraphHopper path has no travel time")
        points = self._object(path.get("points"), "points object")
        return self._build_result(
            points.get("coordinates") or [],
            path.get("distance"),
            time_ms,
            duration_divisor=1000.0,
        )


class MapboxRouteProvider(_HttpRouteProvider):
    """Mapbox Directions API; requires an access token."""

    name = "Mapbox"

    def __init__(self, base_url: str, *, access_token: str | None, **kwargs: Any) -> None:
        super().__init__(base_url, **kwargs)
        self.access_token = access_token

    @property
    def is_configured(self) -> bool:
        return super().is_configured and not _is_placeholder(self.access_token)

    async def route(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        coords = f"{_lon_lat(origin)};{_lon_lat(destination)}"
        url = f"{self.base_url}/directions/v5/mapbox/driving/{coords}"
        data = await self._get_json(
            url,
            {
                "geometries": "geojson",
                "overview": "full",
                "access_token": self.access_token or "",
            },
        )

        if not data.get("routes"):
            raise RouteProviderError(
                f"Mapbox returned no routes: {data.get('message') or data.get('code') or 'unknown'}"
            )
        route = self._first(data.get("routes"), "route")
        geometry = self._object(route.get("geometry"), "geometry")
        return self._build_result(
            geometry.get("coordinates") or [], route.get("distance"), route.get("duration")
        )


def build_route_providers(
    settings: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> list[RouteProvider]:
    """Instantiate the providers named in ``settings.route_providers`` in order."""
    timeout = settings.http_timeout_seconds
    factories = {
        "osrm": lambda: OSRMRouteProvider(
            settings.osrm_base_url, timeout=timeout, transport=transport
        ),
        "graphhopper": lambda: GraphHopperRouteProvider(
            settings.graphhopper_base_url,
            api_key=(
                settings.graphhopper_api_key.get_secret_value()
                if settings.graphhopper_api_key
                else None
            ),
            timeout=timeout,
            transport=transport,
        ),
        "mapbox": lambda: MapboxRouteProvider(
            settings.mapbox_base_url,
            access_token=(
                settings.mapbox_access_token.get_secret_value()
                if settings.mapbox_access_token
                else None
            ),
            timeout=timeout,
            transport=transport,
        ),
    }
    providers: list[RouteProvider] = []
    for key in settings.route_providers:
        factory = factories.get(key)
        if factory is None:
            raise ValueError(f"Unknown route provider: {key!r}")
        providers.append(factory())
    return providers
