"""Database engine, session factory, and declarative base.

Single schema: cards, invoices and the per-supplier counters all live
side by side.  ``get_db()`` is the FastAPI dependency every router uses.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class Base(DeclarativeBase):
    """Declarative base for all Kartat tables."""
    pass


async def get_db() -> AsyncSession:
    """Yield a session; commit on success, roll back and re-raise on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
