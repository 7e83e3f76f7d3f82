from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from app.config import settings
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"echo": settings.debug}
    # Environment-based configurations
    if settings.environment == "production":
        return {
            "pool_size": 20,
            "max_overflow": 50,
            "pool_timeout": 60,
            "pool_recycle": 1800,
            "pool_pre_ping": True,
        }
    return {
        "echo": settings.debug,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": 30,
    }


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores foreign keys unless asked per connection."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str) -> AsyncEngine:
    engine = create_async_engine(url, **_engine_options(url))
    enable_sqlite_foreign_keys(engine)
    return engine


engine = build_engine(settings.database_url)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db():
    async with AsyncSessionLocal() as db:
        try:
            yield db
        except Exception as e:
            logger.error("Database session error: %s", e)
            await db.rollback()
            raise
