from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Coordinate(BaseModel):
    """Immutable latitude/longitude pair in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

    @classmethod
    def from_lon_lat(cls, pair: list[float] | tuple[float, float]) -> "Coordinate":
        """Build a coordinate from a GeoJSON ``[longitude, latitude]`` pair."""
        lon, lat = pair[0], pair[1]
        return cls(latitude=float(lat), longitude=float(lon))


class RouteResult(BaseModel):
    """Common route shape produced by every routing provider adapter.

    Attributes:
        path: Route geometry ordered from origin to destination.
        total_distance_meters: Total driving distance.
        total_duration_seconds: Total driving time.
        provider_name: Identity of the provider that produced the route.
    """

    path: list[Coordinate]
    total_distance_meters: float = Field(ge=0)
    total_duration_seconds: float = Field(ge=0)
    provider_name: str


class WeatherObservation(BaseModel):
    """Predicted weather at a checkpoint.

    ``temperature`` is ``None`` when the weather lookup failed.
    """

    temperature: float | None = None
    condition_code: int = 0
    condition_label: str


class Checkpoint(BaseModel):
    timestamp: datetime
    formatted_time: str
    coordinate: Coordinate
    distance_from_start_km: int = Field(ge=0)
    place_name: str
    weather: WeatherObservation


class ForecastResult(BaseModel):
    """Payload returned to callers and persisted in the forecast cache.

    The field set is the storage contract for cached rows; keep it stable.
    """

    route_geometry: list[Coordinate]
    checkpoints: list[Checkpoint]
    provider_name: str
    total_distance_meters: float
    total_duration_seconds: float


class ForecastRequest(BaseModel):
    origin: str = Field(min_length=1, max_length=255)
    destination: str = Field(min_length=1, max_length=255)
    departure_time: datetime | None = None

    @field_validator("origin", "destination")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value
