from __future__ import annotations

from typing import Sequence

from app.core.logging import logger
from app.schemas.forecast import Coordinate, RouteResult
from app.services.forecast_errors import RouteUnavailable
from app.services.routing_providers import RouteProvider, RouteProviderError


class RouteCascade:
    """Resolve a route by trying providers in priority order.

    Each configured provider gets exactly one attempt; the first success wins
    and later providers are never called. Unconfigured providers are skipped.
    """

    def __init__(self, providers: Sequence[RouteProvider]) -> None:
        self.providers = list(providers)

    async def resolve(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        failures: list[tuple[str, str]] = []

        for provider in self.providers:
            if not provider.is_configured:
                logger.info("Route provider %s not configured; skipping", provider.name)
                failures.append((provider.name, "not configured"))
                continue

            logger.info("Requesting route from %s", provider.name)
            try:
                result = await provider.route(origin, destination)
            except RouteProviderError as exc:
                logger.warning("Route provider %s failed: %s", provider.name, exc)
                failures.append((provider.name, str(exc)))
                continue

            logger.info(
                "Route resolved by %s: %.0f m, %.0f s, %d points",
                result.provider_name,
                result.total_distance_meters,
                result.total_duration_seconds,
                len(result.path),
            )
            return result

        logger.error("All route providers failed: %s", failures)
        raise RouteUnavailable(failures)
