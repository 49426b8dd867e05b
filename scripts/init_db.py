"""Create all tables directly from the model metadata.

Meant for local SQLite databases and throwaway environments; shared
databases are managed with Alembic (see scripts/migrate.py).
"""

import asyncio

from app.database import engine
from app.models import metadata


async def init_db() -> None:
    """Create every table that does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    await engine.dispose()
    print(f"✓ Created tables: {', '.join(sorted(metadata.tables))}")


if __name__ == "__main__":
    asyncio.run(init_db())
