# app/database.py
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from app.config import settings

db_url = settings.effective_database_url

engine_options = {"echo": settings.SQL_ECHO}
if db_url.startswith("sqlite"):
    # sqlite connections must not be shared between event loops
    engine_options["poolclass"] = NullPool

engine = create_async_engine(db_url, **engine_options)

AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
Base = declarative_base()

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
