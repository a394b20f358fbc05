from __future__ import annotations

"""Time-bounded cache of computed route forecasts.

The backing table is insert-only: ``put`` always appends a row and ``get``
reads the newest row for a key, treating it as a miss once it is older than
the TTL. Caching is an optimization only, so store failures are logged and
never propagated to the request.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import logger
from app.models.route_forecast_cache import RouteForecastCache
from app.schemas.forecast import ForecastResult
from app.services.request_normalizer import NormalizedKey

DEFAULT_CACHE_TTL_SECONDS = 3600

SessionFactory = Callable[[], AsyncSession]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class ForecastCache:
    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._session_factory = session_factory
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    def is_expired(self, created_at: datetime) -> bool:
        return self._clock() - _as_utc(created_at) >= self.ttl

    async def get(self, key: NormalizedKey) -> Optional[ForecastResult]:
        """Return the freshest non-expired forecast for ``key``, if any."""
        stmt = (
            select(RouteForecastCache)
            .where(
                RouteForecastCache.origin == key.origin,
                RouteForecastCache.destination == key.destination,
                RouteForecastCache.hour_bucket == key.hour_bucket,
            )
            .order_by(RouteForecastCache.created_at.desc(), RouteForecastCache.id.desc())
            .limit(1)
        )
        try:
            async with self._session_factory() as session:
                row = (await session.execute(stmt)).scalars().first()
        except Exception:
            logger.warning("Forecast cache lookup failed; treating as miss", exc_info=True)
            return None

        if row is None:
            return None
        if self.is_expired(row.created_at):
            logger.info("Forecast cache entry for %s expired", key)
            return None
        try:
            return ForecastResult.model_validate(row.payload)
        except ValidationError:
            logger.warning("Discarding unreadable forecast cache entry id=%s", row.id)
            return None

    async def put(self, key: NormalizedKey, result: ForecastResult) -> None:
        """Append ``result`` for ``key``. Failures are logged and swallowed."""
        entry = RouteForecastCache(
            origin=key.origin,
            destination=key.destination,
            hour_bucket=key.hour_bucket,
            payload=result.model_dump(mode="json"),
            created_at=self._clock(),
        )
        try:
            async with self._session_factory() as session:
                session.add(entry)
                try:
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
        except Exception:
            logger.warning("Failed to store forecast cache entry for %s", key, exc_info=True)
