from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from .settings import Settings, settings


def engine_options(config: Settings) -> dict:
    options = {"echo": config.DATABASE_ECHO, "pool_pre_ping": True}
    if not config.DATABASE_URL.startswith("sqlite"):
        options.update(
            pool_size=config.DATABASE_POOL_SIZE,
            max_overflow=config.DATABASE_MAX_OVERFLOW,
            pool_recycle=config.DATABASE_POOL_RECYCLE,
        )
    return options


async_engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL, **engine_options(settings)
)

AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db_async():
    async with AsyncSessionLocal() as session:
        yield session


Base = declarative_base()
