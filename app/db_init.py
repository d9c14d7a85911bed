"""
Schema and Seed Initialization
Idempotently creates all tables and loads fixture data on startup
"""

import logging
import uuid
from databases import Database
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex, CreateTable
from app import models  # noqa: F401  (registers tables on metadata)
from app.auth.password import hash_password
from app.database import metadata

logger = logging.getLogger(__name__)

SEED_USER_EMAIL = "testuser@lsu.edu"
SEED_USER_PASSWORD = "password123"


def schema_statements() -> list[str]:
    """
    Render CREATE TABLE / CREATE INDEX statements for every model

    Tables come out in foreign-key dependency order, each guarded with
    IF NOT EXISTS so the whole list can be replayed on every start.
    """
    dialect = postgresql.dialect()
    statements = []
    for table in metadata.sorted_tables:
        statements.append(str(CreateTable(table, if_not_exists=True).compile(dialect=dialect)))
        for index in sorted(table.indexes, key=lambda i: i.name):
            statements.append(str(CreateIndex(index, if_not_exists=True).compile(dialect=dialect)))
    return statements


async def init_schema(database: Database) -> None:
    """Create tables and indexes that do not exist yet"""
    for statement in schema_statements():
        await database.execute(statement)
    logger.info("Schema ready (%d tables)", len(metadata.sorted_tables))


async def seed(database: Database) -> None:
    """
    Insert sample data for local testing

    Every insert is guarded by ON CONFLICT / NOT EXISTS, so running this
    repeatedly leaves exactly one copy of each fixture.
    """
    await database.execute(
        """
        INSERT INTO users (id, email, password_hash, username, full_name)
        VALUES (:id, :email, :password_hash, :username, :full_name)
        ON CONFLICT (email) DO NOTHING
        """,
        {
            "id": str(uuid.uuid4()),
            "email": SEED_USER_EMAIL,
            "password_hash": hash_password(SEED_USER_PASSWORD),
            "username": "testuser",
            "full_name": "Test User",
        }
    )

    user_id = await database.fetch_val(
        "SELECT id FROM users WHERE email = :email",
        {"email": SEED_USER_EMAIL}
    )
    if user_id is None:
        logger.warning("Seed user missing after insert; skipping fixtures")
        return

    await database.execute(
        """
        INSERT INTO clothing_items (
            id, owner_id, title, description, category, size, condition,
            purchase_price, rental_price, images
        )
        SELECT CAST(:id AS UUID), CAST(:owner_id AS UUID), 'Blue Jeans', 'Comfortable casual blue jeans',
               'pants', 'M', 'good', 49.99, 5.99, CAST(:images AS TEXT[])
        WHERE NOT EXISTS (
            SELECT 1 FROM clothing_items WHERE title = 'Blue Jeans'
        )
        """,
        {
            "id": str(uuid.uuid4()),
            "owner_id": user_id,
            "images": ["jeans1.jpg", "jeans2.jpg"],
        }
    )

    await database.execute(
        """
        INSERT INTO events (id, creator_id, title, description, event_date, location, image_url)
        SELECT CAST(:id AS UUID), CAST(:creator_id AS UUID), 'Summer Fashion Show', 'Annual summer fashion exhibition',
               NOW() + INTERVAL '30 days', 'Central Park', 'event1.jpg'
        WHERE NOT EXISTS (
            SELECT 1 FROM events WHERE title = 'Summer Fashion Show'
        )
        """,
        {"id": str(uuid.uuid4()), "creator_id": user_id}
    )

    await database.execute(
        """
        INSERT INTO messages (id, sender_id, receiver_id, content)
        SELECT CAST(:id AS UUID), CAST(:user_id AS UUID), CAST(:user_id AS UUID), 'Welcome to the platform!'
        WHERE NOT EXISTS (
            SELECT 1 FROM messages
            WHERE sender_id = :user_id AND content = 'Welcome to the platform!'
        )
        """,
        {"id": str(uuid.uuid4()), "user_id": user_id}
    )

    logger.info("Sample data loaded")


async def initialize_database(database: Database, with_seed: bool = True) -> None:
    """Run schema creation and, optionally, seeding"""
    await init_schema(database)
    if with_seed:
        await seed(database)
