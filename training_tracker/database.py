from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool
import logging

from training_tracker.config import Config

logger = logging.getLogger(__name__)

DATABASE_URL = Config.DATABASE_URL

def build_engine(url: str):
    # SQLite connections are cheap and must not outlive the event loop that opened them
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False, poolclass=NullPool)
    return create_async_engine(url, echo=False)

engine = build_engine(DATABASE_URL)

SessionLocal = async_sessionmaker(
    autocommit=False, autoflush=False, bind=engine, class_=AsyncSession, expire_on_commit=False
)

class Base(DeclarativeBase):
    pass

async def get_db():
    async with SessionLocal() as session:
        yield session

async def init_db():
    # Import models so they register with Base
    from training_tracker.models import user, topic, progress  # noqa: F401

    logger.info("Ensuring database schema at %s", engine.url.render_as_string(hide_password=True))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
