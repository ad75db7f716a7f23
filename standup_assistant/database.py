from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from .config import settings
from .models.base import Base

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    future=True
)

# Create session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create all tables registered on the declarative base"""
    # Import models so they're registered
    from .models import standup_entry, standup_thread, performance_metrics, achievement, alert  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

