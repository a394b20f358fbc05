from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

load_dotenv()

from app.services.forecast_errors import ForecastError  # noqa: E402
from app.services.forecast_service import build_orchestrator  # noqa: E402
from core.settings import get_settings  # noqa: E402
from db.session import AsyncSessionLocal, engine  # noqa: E402


async def main(origin: str, destination: str, departure: datetime | None) -> int:
    orchestrator = build_orchestrator(get_settings(), AsyncSessionLocal)
    try:
        result = await orchestrator.compute_forecast(origin, destination, departure)
    except ForecastError as exc:
        print(f"Error: {exc}")
        if exc.technical_detail:
            print(f"  {exc.technical_detail}")
        return 1
    finally:
        await engine.dispose()

    print(
        f"{result.provider_name}: {result.total_distance_meters / 1000:.0f} km, "
        f"{result.total_duration_seconds / 3600:.1f} h"
    )
    for cp in result.checkpoints:
        temp = "--" if cp.weather.temperature is None else f"{cp.weather.temperature:.1f}°C"
        print(
            f"{cp.formatted_time}  {cp.distance_from_start_km:>5} km  "
            f"{cp.place_name:<30} {temp:>7}  {cp.weather.condition_label}"
        )
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print the weather along a driving route.")
    parser.add_argument("origin")
    parser.add_argument("destination")
    parser.add_argument(
        "--departure",
        type=datetime.fromisoformat,
        default=None,
        help="ISO departure time, e.g. 2024-06-01T08:00 (defaults to now)",
    )
    args = parser.parse_args()
    raise SystemExit(asyncio.run(main(args.origin, args.destination, args.departure)))
