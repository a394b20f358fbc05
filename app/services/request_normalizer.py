from __future__ import annotations

"""Cache-key normalization for route forecast requests."""

from dataclasses import dataclass
from datetime import datetime, timezone

HOUR_BUCKET_FORMAT = "%Y-%m-%dT%H"


@dataclass(frozen=True)
class NormalizedKey:
    """Cache identity of a forecast request.

    Two requests share a key iff their normalized origin, destination and
    departure hour are identical.
    """

    origin: str
    destination: str
    hour_bucket: str


def normalize_place(text: str) -> str:
    return text.strip().lower()


def resolve_departure_time(
    departure_time: datetime | None, now: datetime | None = None
) -> datetime:
    """Return the departure time, defaulting to ``now`` (UTC) when absent."""
    if departure_time is not None:
        return departure_time
    return now if now is not None else datetime.now(timezone.utc)


def hour_bucket(moment: datetime) -> str:
    """Truncate ``moment`` to the hour.

    Aware datetimes are bucketed in UTC so the same instant always lands in the
    same bucket; naive datetimes are bucketed as given.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.replace(minute=0, second=0, microsecond=0).strftime(
        HOUR_BUCKET_FORMAT
    )


def normalize_request(
    origin: str,
    destination: str,
    departure_time: datetime | None = None,
    *,
    now: datetime | None = None,
) -> NormalizedKey:
    departure = resolve_departure_time(departure_time, now)
    return NormalizedKey(
        origin=normalize_place(origin),
        destination=normalize_place(destination),
        hour_bucket=hour_bucket(departure),
    )
