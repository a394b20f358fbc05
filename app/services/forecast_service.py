from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

import httpx

from app.core.logging import logger
from app.schemas.forecast import Coordinate, ForecastResult
from app.services.checkpoints import CheckpointInterpolator
from app.services.forecast_cache import ForecastCache, SessionFactory
from app.services.forecast_errors import LocationNotFound
from app.services.geocoding import NominatimGeocoder
from app.services.request_normalizer import normalize_request, resolve_departure_time
from app.services.route_cascade import RouteCascade
from app.services.routing_providers import build_route_providers
from app.services.weather import OpenMeteoWeatherProvider
from core.settings import Settings


class ForwardGeocoder(Protocol):
    async def forward(self, query: str) -> Optional[Coordinate]: ...


class ForecastOrchestrator:
    """Compute weather checkpoints along the driving route between two places.

    Pipeline: normalize the request into a cache key, serve a fresh cached
    result when there is one, otherwise geocode both endpoints, resolve the
    route through the provider cascade, sample checkpoints and store the
    result before returning it.
    """

    def __init__(
        self,
        *,
        cache: ForecastCache,
        geocoder: ForwardGeocoder,
        cascade: RouteCascade,
        interpolator: CheckpointInterpolator,
    ) -> None:
        self.cache = cache
        self.geocoder = geocoder
        self.cascade = cascade
        self.interpolator = interpolator

    async def compute_forecast(
        self,
        origin_text: str,
        destination_text: str,
        departure_time: datetime | None = None,
    ) -> ForecastResult:
        """Return the route forecast for a trip.

        Raises:
            LocationNotFound: If either endpoint could not be geocoded.
            RouteUnavailable: If every routing provider failed.
        """
        departure = resolve_departure_time(departure_time)
        key = normalize_request(origin_text, destination_text, departure)

        cached = await self.cache.get(key)
        if cached is not None:
            logger.info("Forecast cache hit: %s -> %s", origin_text, destination_text)
            return cached
        logger.info("Forecast cache miss: %s -> %s", origin_text, destination_text)

        origin = await self.geocoder.forward(origin_text)
        if origin is None:
            raise LocationNotFound(origin_text)
        destination = await self.geocoder.forward(destination_text)
        if destination is None:
            raise LocationNotFound(destination_text)

        route = await self.cascade.resolve(origin, destination)
        checkpoints = await self.interpolator.interpolate(
            route, departure, fallback_coordinate=origin
        )

        result = ForecastResult(
            route_geometry=route.path,
            checkpoints=checkpoints,
            provider_name=route.provider_name,
            total_distance_meters=route.total_distance_meters,
            total_duration_seconds=route.total_duration_seconds,
        )
        await self.cache.put(key, result)
        return result


def build_orchestrator(
    settings: Settings,
    session_factory: SessionFactory,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ForecastOrchestrator:
    """Wire the default Nominatim/OSRM/GraphHopper/Mapbox/Open-Meteo stack."""
    geocoder = NominatimGeocoder.from_settings(settings, transport=transport)
    weather = OpenMeteoWeatherProvider.from_settings(settings, transport=transport)
    return ForecastOrchestrator(
        cache=ForecastCache(session_factory, ttl_seconds=settings.cache_ttl_seconds),
        geocoder=geocoder,
        cascade=RouteCascade(build_route_providers(settings, transport=transport)),
        interpolator=CheckpointInterpolator(
            geocoder,
            weather,
            interval_seconds=settings.checkpoint_interval_seconds,
            reverse_geocode_delay_seconds=settings.reverse_geocode_delay_seconds,
        ),
    )
