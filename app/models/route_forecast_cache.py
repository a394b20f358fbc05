from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base, CreatedAtMixin


class RouteForecastCache(CreatedAtMixin, Base):
    """Append-only cache of computed route forecasts.

    Rows are never updated; lookups pick the newest row for a key and ignore it
    once it is older than the configured TTL.

    Attributes:
        origin: Normalized (trimmed, lower-cased) origin text.
        destination: Normalized destination text.
        hour_bucket: Departure time truncated to the hour (``YYYY-MM-DDTHH``).
        payload: Serialized ``ForecastResult``.
    """

    __tablename__ = "route_forecast_cache"
    __table_args__ = (
        Index(
            "ix_route_forecast_cache_lookup",
            "origin",
            "destination",
            "hour_bucket",
            "created_at",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    origin: Mapped[str] = mapped_column(String(255))
    destination: Mapped[str] = mapped_column(String(255))
    hour_bucket: Mapped[str] = mapped_column(String(13))
    payload: Mapped[dict[str, Any]] = mapped_column(JSON)
