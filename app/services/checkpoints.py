from __future__ import annotations

"""Sampling of weather checkpoints along a resolved route.

The route's duration axis is walked at a fixed interval. Each time offset is
mapped to a position on the route geometry proportionally to elapsed time, then
enriched with a reverse-geocoded place name and the forecast for the moment the
traveler is expected to be there. Checkpoints are processed strictly one after
another: the reverse geocoder is a shared public service with a rate limit, so
a fixed delay precedes every reverse lookup.
"""

import asyncio
import math
from datetime import datetime, timedelta
from typing import Optional, Protocol

from app.core.logging import logger
from app.schemas.forecast import Checkpoint, Coordinate, RouteResult, WeatherObservation
from app.services.weather_codes import translate_weather_code

DEFAULT_CHECKPOINT_INTERVAL_SECONDS = 3600
PLACE_PLACEHOLDER = "Trajeto"
FORMATTED_TIME_FORMAT = "%d/%m %H:%M"


class ReverseGeocoder(Protocol):
    async def reverse(self, coordinate: Coordinate) -> Optional[str]: ...


class WeatherLookup(Protocol):
    async def observation_at(
        self, coordinate: Coordinate, when: datetime
    ) -> WeatherObservation: ...


def unavailable_weather() -> WeatherObservation:
    return WeatherObservation(
        temperature=None, condition_code=0, condition_label=translate_weather_code(0)
    )


def checkpoint_offsets(total_duration: float, interval: float) -> list[float]:
    """Return the time offsets (seconds) at which checkpoints are taken.

    Starts at 0, advances by ``interval`` and always ends exactly at
    ``total_duration``; the last step is shortened rather than overshooting.
    """
    if interval <= 0:
        raise ValueError("interval must be positive")
    offsets: list[float] = []
    offset = 0.0
    while True:
        offsets.append(offset)
        if offset >= total_duration:
            break
        offset = min(offset + interval, total_duration)
    return offsets


def path_index(progress: float, path_length: int) -> int:
    """Map route progress in ``[0, 1]`` to an index into the route geometry."""
    last = path_length - 1
    if last <= 0:
        return 0
    index = math.floor(progress * last)
    return max(0, min(index, last))


class CheckpointInterpolator:
    def __init__(
        self,
        geocoder: ReverseGeocoder,
        weather: WeatherLookup,
        *,
        interval_seconds: float = DEFAULT_CHECKPOINT_INTERVAL_SECONDS,
        reverse_geocode_delay_seconds: float = 0.0,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.geocoder = geocoder
        self.weather = weather
        self.interval_seconds = interval_seconds
        self.reverse_geocode_delay_seconds = reverse_geocode_delay_seconds

    async def interpolate(
        self,
        route: RouteResult,
        departure_time: datetime,
        *,
        fallback_coordinate: Coordinate | None = None,
    ) -> list[Checkpoint]:
        """Return checkpoints ordered by time for ``route`` leaving at ``departure_time``.

        Args:
            route: Resolved route (geometry plus totals).
            departure_time: Absolute departure time; checkpoint timestamps keep
                its timezone (or lack of one).
            fallback_coordinate: Position used for the synthetic checkpoint when
                the route has no geometry.

        Returns:
            At least one checkpoint. The first is at the departure time, the
            last at ``departure_time + total_duration_seconds``.
        """
        path = route.path
        total_duration = route.total_duration_seconds

        if not path or total_duration <= 0:
            logger.warning(
                "Route from %s has no usable geometry or duration; "
                "returning a single departure checkpoint",
                route.provider_name,
            )
            coordinate = (
                path[0] if path else fallback_coordinate or Coordinate(latitude=0, longitude=0)
            )
            return [
                Checkpoint(
                    timestamp=departure_time,
                    formatted_time=departure_time.strftime(FORMATTED_TIME_FORMAT),
                    coordinate=coordinate,
                    distance_from_start_km=0,
                    place_name=PLACE_PLACEHOLDER,
                    weather=unavailable_weather(),
                )
            ]

        checkpoints: list[Checkpoint] = []
        for offset in checkpoint_offsets(total_duration, self.interval_seconds):
            progress = offset / total_duration
            coordinate = path[path_index(progress, len(path))]
            when = departure_time + timedelta(seconds=offset)
            distance_km = max(
                0, math.floor(route.total_distance_meters * progress / 1000)
            )

            place_name = await self._place_name(coordinate)
            weather = await self._weather(coordinate, when)

            checkpoints.append(
                Checkpoint(
                    timestamp=when,
                    formatted_time=when.strftime(FORMATTED_TIME_FORMAT),
                    coordinate=coordinate,
                    distance_from_start_km=distance_km,
                    place_name=place_name,
                    weather=weather,
                )
            )
        return checkpoints

    async def _place_name(self, coordinate: Coordinate) -> str:
        if self.reverse_geocode_delay_seconds > 0:
            await asyncio.sleep(self.reverse_geocode_delay_seconds)
        try:
            name = await self.geocoder.reverse(coordinate)
        except Exception as exc:
            logger.warning("Reverse geocoding raised; using placeholder: %s", exc)
            return PLACE_PLACEHOLDER
        return name or PLACE_PLACEHOLDER

    async def _weather(self, coordinate: Coordinate, when: datetime) -> WeatherObservation:
        try:
            return await self.weather.observation_at(coordinate, when)
        except Exception as exc:
            logger.warning(
                "Weather lookup failed for (%s, %s) at %s: %s",
                coordinate.latitude,
                coordinate.longitude,
                when.isoformat(),
                exc,
            )
            return unavailable_weather()
