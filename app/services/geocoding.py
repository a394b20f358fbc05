from __future__ import annotations

from typing import Any, Optional

import httpx

from app.core.logging import logger
from app.schemas.forecast import Coordinate
from core.settings import Settings

BRAZIL_STATES: dict[str, str] = {
    "Acre": "AC",
    "Alagoas": "AL",
    "Amapá": "AP",
    "Amazonas": "AM",
    "Bahia": "BA",
    "Ceará": "CE",
    "Distrito Federal": "DF",
    "Espírito Santo": "ES",
    "Goiás": "GO",
    "Maranhão": "MA",
    "Mato Grosso": "MT",
    "Mato Grosso do Sul": "MS",
    "Minas Gerais": "MG",
    "Pará": "PA",
    "Paraíba": "PB",
    "Paraná": "PR",
    "Pernambuco": "PE",
    "Piauí": "PI",
    "Rio de Janeiro": "RJ",
    "Rio Grande do Norte": "RN",
    "Rio Grande do Sul": "RS",
    "Rondônia": "RO",
    "Roraima": "RR",
    "Santa Catarina": "SC",
    "São Paulo": "SP",
    "Sergipe": "SE",
    "Tocantins": "TO",
}

# Used when the reverse lookup returns an address without a settlement
ROAD_PLACEHOLDER = "Estrada"


def format_place_name(address: dict[str, Any]) -> str:
    """Format a Nominatim address as ``"City, UF"``.

    Falls back to the full state name when it has no known abbreviation and to
    the bare city when no state is present.
    """
    city = (
        address.get("city")
        or address.get("town")
        or address.get("village")
        or address.get("municipality")
        or ROAD_PLACEHOLDER
    )
    state = address.get("state") or ""
    uf = BRAZIL_STATES.get(state, state)
    return f"{city}, {uf}" if uf else city


class NominatimGeocoder:
    """Forward and reverse geocoding against a Nominatim server.

    Lookups never raise: transport errors, timeouts and empty results are
    logged and reported as ``None`` so callers decide how to degrade.
    """

    def __init__(
        self,
        base_url: str,
        *,
        user_agent: str,
        country_codes: str | None = None,
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.country_codes = country_codes
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "NominatimGeocoder":
        return cls(
            settings.nominatim_base_url,
            user_agent=settings.geocoder_user_agent,
            country_codes=settings.geocoder_country_codes or None,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"User-Agent": self.user_agent},
        ) as client:
            resp = await client.get(f"{self.base_url}{path}", params=params)
            resp.raise_for_status()
            return resp.json()

    async def forward(self, query: str) -> Optional[Coordinate]:
        """Return the best coordinate match for ``query`` or None."""
        if not query or not query.strip():
            return None

        params: dict[str, Any] = {"format": "json", "q": query.strip(), "limit": 1}
        if self.country_codes:
            params["countrycodes"] = self.country_codes

        try:
            data = await self._get_json("/search", params)
            if not data:
                logger.warning("No geocoding results for %r", query)
                return None
            first = data[0]
            return Coordinate(latitude=float(first["lat"]), longitude=float(first["lon"]))
        except Exception as exc:
            logger.error("Forward geocoding failed for %r: %s", query, exc)
            return None

    async def reverse(self, coordinate: Coordinate) -> Optional[str]:
        """Return a ``"City, UF"`` label for ``coordinate`` or None."""
        params = {
            "format": "json",
            "lat": coordinate.latitude,
            "lon": coordinate.longitude,
            "zoom": 10,
        }
        try:
            data = await self._get_json("/reverse", params)
            address = (data or {}).get("address")
            if not address:
                return None
            return format_place_name(address)
        except Exception as exc:
            logger.warning(
                "Reverse geocoding failed for (%s, %s): %s",
                coordinate.latitude,
                coordinate.longitude,
                exc,
            )
            return None
