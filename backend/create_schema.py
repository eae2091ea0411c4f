"""Create the tables for a local database (the hosted store manages its own schema)."""

import asyncio
import sys

from core.config import get_settings
from core.database import init_database, dispose_database, get_database_manager
import models  # noqa: F401


def _is_sqlite_url(url: str) -> bool:
    return bool(url) and "sqlite" in url.lower()


async def main() -> int:
    settings = get_settings()
    if not _is_sqlite_url(settings.database_url):
        print("Refusing to create tables outside SQLite; the hosted store owns its schema", file=sys.stderr)
        return 1

    await init_database(settings.database_url)
    try:
        await get_database_manager().create_schema()
    finally:
        await dispose_database()
    print("schema ok")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
