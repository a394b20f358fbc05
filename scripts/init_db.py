from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import NoReturn

# Ensure the project root (parent of this file's directory) is on sys.path
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from app.core.logging import logger  # noqa: E402
from app.models import Base  # noqa: E402
from app.models import route_forecast_cache  # noqa: E402,F401
from db.session import engine  # noqa: E402


async def _init_db_async() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Created tables: %s", ", ".join(sorted(Base.metadata.tables)))
    await engine.dispose()


def main() -> NoReturn:
    """Create the cache schema without Alembic (local development only)."""
    asyncio.run(_init_db_async())
    raise SystemExit(0)


if __name__ == "__main__":
    main()
