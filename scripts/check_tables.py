import asyncio
from app.config import settings
from app.database import create_database, metadata
from app import models  # noqa: F401


async def main():
    database = create_database(settings)
    await database.connect()
    try:
        rows = await database.fetch_all(
            "select tablename from pg_tables where schemaname='public' order by tablename"
        )
        present = {row["tablename"] for row in rows}
        print('public tables:', sorted(present))
        missing = sorted(set(metadata.tables) - present)
        if missing:
            print('missing tables:', missing)
    finally:
        await database.disconnect()

if __name__ == '__main__':
    asyncio.run(main())
