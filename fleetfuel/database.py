"""
Base de donnees / Database layer.

SQLite en developpement (aiosqlite), PostgreSQL en production (asyncpg).
Les services ne committent jamais : la session de requete le fait.
Services never commit: the request session does it on success.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from fleetfuel.config import settings


def _engine_options(url: str) -> dict:
    options: dict = {"echo": settings.DEBUG}
    if not url.startswith("sqlite"):
        # Pool partage par les workers uvicorn / pool shared by uvicorn workers
        options.update(pool_size=10, max_overflow=20, pool_recycle=1800, pool_pre_ping=True)
    return options


def enable_sqlite_foreign_keys(async_engine) -> None:
    """SQLite ignore ON DELETE CASCADE sans ce pragma / SQLite skips cascades without this pragma."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _pragma(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
if engine.dialect.name == "sqlite":
    enable_sqlite_foreign_keys(engine)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """Session par requete, commit ou rollback / Per-request session, commit or rollback."""
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()


async def init_db():
    """Creer les tables manquantes / Create missing tables."""
    import fleetfuel.models  # noqa: F401  (remplit Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
