from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

import httpx

from app.schemas.forecast import Coordinate, WeatherObservation
from app.services.weather_codes import translate_weather_code
from core.settings import Settings


class WeatherLookupError(RuntimeError):
    """Raised when the weather provider cannot answer for a place and time."""


@dataclass(frozen=True)
class HourlyWeather:
    time: datetime
    temperature: float | None
    condition_code: int


class OpenMeteoWeatherProvider:
    """Hourly forecasts from the Open-Meteo API.

    Naive datetimes are interpreted as local time at the coordinate
    (``timezone=auto``); aware datetimes are looked up in UTC.
    """

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

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "OpenMeteoWeatherProvider":
        return cls(
            settings.open_meteo_base_url,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    async def hourly_forecast(
        self, coordinate: Coordinate, day: date, *, tz: str = "auto"
    ) -> list[HourlyWeather]:
        """Return the 24 hourly readings for ``day`` at ``coordinate``."""
        params: dict[str, Any] = {
            "latitude": coordinate.latitude,
            "longitude": coordinate.longitude,
            "hourly": "temperature_2m,weathercode",
            "start_date": day.isoformat(),
            "end_date": day.isoformat(),
            "timezone": tz,
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.get(f"{self.base_url}/forecast", params=params)
                resp.raise_for_status()
                hourly = resp.json()["hourly"]
            times = hourly["time"]
            temps = hourly["temperature_2m"]
            codes = hourly["weathercode"]
            return [
                HourlyWeather(
                    time=datetime.fromisoformat(t),
                    temperature=float(temp) if temp is not None else None,
                    condition_code=int(code) if code is not None else 0,
                )
                for t, temp, code in zip(times, temps, codes)
            ]
        except httpx.HTTPError as exc:
            raise WeatherLookupError(f"Open-Meteo request failed: {exc}") from exc
        except (KeyError, TypeError, ValueError) as exc:
            raise WeatherLookupError(f"Malformed Open-Meteo response: {exc}") from exc

    async def observation_at(
        self, coordinate: Coordinate, when: datetime
    ) -> WeatherObservation:
        """Return the forecast for the hour containing ``when``."""
        tz = "auto"
        if when.tzinfo is not None:
            when = when.astimezone(timezone.utc).replace(tzinfo=None)
            tz = "UTC"

        readings = await self.hourly_forecast(coordinate, when.date(), tz=tz)
        target = when.replace(minute=0, second=0, microsecond=0)
        reading = next((r for r in readings if r.time == target), None)
        if reading is None:
            raise WeatherLookupError(
                f"No hourly forecast for {target.isoformat()} at "
                f"({coordinate.latitude}, {coordinate.longitude})"
            )
        return WeatherObservation(
            temperature=reading.temperature,
            condition_code=reading.condition_code,
            condition_label=translate_weather_code(reading.condition_code),
        )
