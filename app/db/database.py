from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from sqlalchemy import text
import logging
import os
from urllib.parse import quote_plus

from app.core.config import settings

logger = logging.getLogger(__name__)


def build_connection_string() -> str:
    if settings.DATABASE_URL:
        return settings.DATABASE_URL

    if settings.DB_USER and settings.DB_PASSWORD:
        # SQL Authentication
        driver = settings.DB_DRIVER.replace(' ', '+')
        password = quote_plus(settings.DB_PASSWORD)
        return (
            f"mssql+aioodbc://{settings.DB_USER}:{password}@{settings.DB_SERVER}/{settings.DB_NAME}"
            f"?driver={driver}"
            f"&TrustServerCertificate={'yes' if settings.DB_TRUST_SERVER_CERTIFICATE else 'no'}"
        )

    # Windows Authentication
    return (
        f"mssql+aioodbc://"
        f"?driver={settings.DB_DRIVER.replace(' ', '+')}"
        f"&server={settings.DB_SERVER}"
        f"&database={settings.DB_NAME}"
        f"&trusted_connection={'yes' if settings.DB_TRUSTED_CONNECTION else 'no'}"
        f"&TrustServerCertificate={'yes' if settings.DB_TRUST_SERVER_CERTIFICATE else 'no'}"
    )


def _ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    prefix = "sqlite+aiosqlite:///"
    if not url.startswith(prefix) or url.endswith(":memory:"):
        return
    directory = os.path.dirname(url[len(prefix):])
    if directory:
        os.makedirs(directory, exist_ok=True)


connection_string = build_connection_string()
_ensure_sqlite_directory(connection_string)

engine = create_async_engine(
    connection_string,
    echo=settings.DEBUG,
    poolclass=NullPool,
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    # Import models so their tables are registered on Base.metadata
    from app.db import models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database connection established")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        logger.warning("Continuing without database connection...")


async def close_db():
    await engine.dispose()
    logger.info("Database connections closed")
