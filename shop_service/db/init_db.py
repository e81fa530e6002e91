# shop_service/db/init_db.py
from sqlalchemy.ext.asyncio import AsyncEngine

from shop_service.db.database import Base
from shop_service.db import models  # noqa: F401  (registers tables on Base.metadata)


async def init_db(engine: AsyncEngine):
    async with engine.begin() as conn:
        # Create all tables
        await conn.run_sync(Base.metadata.create_all)
