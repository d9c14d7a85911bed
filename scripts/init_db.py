"""
Create the schema (and optionally the sample data) without starting the API

Usage: python scripts/init_db.py [--no-seed]
"""

import asyncio
import sys
from app.config import settings
from app.database import create_database
from app.db_init import initialize_database, SEED_USER_EMAIL


async def main(with_seed: bool):
    database = create_database(settings)
    await database.connect()
    try:
        await initialize_database(database, with_seed=with_seed)
    finally:
        await database.disconnect()

    print('schema ready')
    if with_seed:
        print(f'sample login: {SEED_USER_EMAIL}')

if __name__ == '__main__':
    asyncio.run(main(with_seed="--no-seed" not in sys.argv[1:]))
