#!/usr/bin/env python3
"""
Database initialization script for CompanyHub
Creates the users, company_profile and audit_logs tables
"""
import asyncio
import logging
from dotenv import load_dotenv
from sqlalchemy import inspect

# Load environment variables
load_dotenv()

from app.database import engine, init_models, DATABASE_URL  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("init_db")


async def main():
    logger.info("Creating tables on %s", DATABASE_URL.split("@")[-1])
    await init_models()
    async with engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    logger.info("Tables present: %s", ", ".join(sorted(tables)))
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
