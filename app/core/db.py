import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings


logger = logging.getLogger(__name__)


_engine: AsyncEngine | None = None
_SessionLocal: async_sessionmaker[AsyncSession] | None = None


def _to_async_url(dsn: str) -> str:
    # превращаем postgresql://... -> postgresql+asyncpg://...
    return dsn.replace("postgresql://", "postgresql+asyncpg://", 1)


def init_engine_if_needed():
    """Инициализация движка/фабрики сессий один раз (лениво)."""
    global _engine, _SessionLocal
    if _engine is not None and _SessionLocal is not None:
        return

    async_url = _to_async_url(settings.DATABASE_URL)
    _engine = create_async_engine(
        async_url,
        pool_pre_ping=True,
        future=True,
    )
    _SessionLocal = async_sessionmaker(
        _engine, expire_on_commit=False, autoflush=False
    )
    logger.info("SQLAlchemy async engine initialized")


def get_engine() -> AsyncEngine:
    init_engine_if_needed()
    assert _engine is not None
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency: фабрика сессий для кода, которому нужно несколько сессий сразу."""
    init_engine_if_needed()
    assert _SessionLocal is not None  # для type-checker
    return _SessionLocal


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: выдаёт AsyncSession и корректно закрывает её."""
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        yield session
