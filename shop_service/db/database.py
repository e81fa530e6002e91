# shop_service/db/database.py
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

# Declarative base for the models
Base = declarative_base()


def make_engine(database_url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    # Async engine
    return create_async_engine(database_url, echo=echo, **kwargs)


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    # Async session factory
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


# One session per request
async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.sessionmaker() as session:
        yield session
