import os
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Relational database (Credential Store + company profiles)
DATABASE_URL = os.getenv("DATABASE_URL") or os.getenv("POSTGRES_URI") or "sqlite+aiosqlite:///./companyhub.db"
SQL_ECHO = os.getenv("SQL_ECHO", "0") == "1"

engine = create_async_engine(DATABASE_URL, echo=SQL_ECHO)
AsyncSessionLocal = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False
)


# Database dependency
async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


async def init_models():
    """Create all tables that do not exist yet."""
    from app.models.user import Base
    import app.models.company  # noqa: F401  (registers the table on Base.metadata)
    import app.models.audit_log  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_connection() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
