"""
Create the PostgreSQL database used when tests run with TEST_DATABASE_URL.

The default test run uses in-memory SQLite and needs none of this.
"""
import asyncio
import os
import asyncpg
from sqlalchemy.ext.asyncio import create_async_engine
from app.core.logging import logger
from app.db.session import Base
import app.db.models  # noqa: F401

DB_USER = os.getenv("POSTGRES_USER", "postgres")
DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", "5432"))
DB_NAME = os.getenv("TEST_DB_NAME", "eventcircle_test")


async def ensure_database() -> None:
    conn = await asyncpg.connect(
        user=DB_USER, password=DB_PASSWORD, host=DB_HOST, port=DB_PORT, database="postgres"
    )
    try:
        exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", DB_NAME)
        if exists:
            logger.info(f"Database '{DB_NAME}' already exists")
        else:
            await conn.execute(f'CREATE DATABASE "{DB_NAME}"')
            logger.info(f"Database '{DB_NAME}' created")
    finally:
        await conn.close()


async def create_tables() -> None:
    url = f"postgresql+asyncpg://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
    engine = create_async_engine(url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()
    logger.info(f"Tables ready; run tests with TEST_DATABASE_URL={url}")


async def main() -> None:
    await ensure_database()
    await create_tables()


if __name__ == "__main__":
    asyncio.run(main())
