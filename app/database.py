"""
Database Connection Management
Uses PostgreSQL with asyncpg through the `databases` package
"""

import logging
from databases import Database
from fastapi import Request
from sqlalchemy.orm import declarative_base
from sqlalchemy import MetaData
from app.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# Metadata for models
metadata = MetaData()

# Base class for models
Base = declarative_base(metadata=metadata)


def create_database(config: Settings = default_settings) -> Database:
    """
    Build a database handle from settings

    The handle is owned by the application instance (see app.main) and
    handed to services per request; nothing here keeps a module-level pool.
    """
    url = config.database_url

    # For Supabase connection pooler (pgbouncer), disable prepared statements
    if "supabase.com" in url or "pooler.supabase.com" in url:
        db_options = {"min_size": 1, "max_size": 5, "statement_cache_size": 0}
    else:
        db_options = {
            "min_size": config.DB_POOL_MIN_SIZE,
            "max_size": config.DB_POOL_MAX_SIZE,
        }

    if config.is_production:
        db_options["ssl"] = "require"

    return Database(url, **db_options)


# Dependency to get the request's database handle
async def get_database(request: Request) -> Database:
    """Get database connection"""
    return request.app.state.database


async def connect_db(database: Database):
    """Connect to database on startup"""
    await database.connect()
    logger.info("Database connected")


async def disconnect_db(database: Database):
    """Disconnect from database on shutdown"""
    await database.disconnect()
    logger.info("Database disconnected")
