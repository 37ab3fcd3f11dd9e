"""
Database Client

Async SQLAlchemy database connection and session management.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from document_service.config.settings import settings
from document_service.infrastructure.database.models import Base

logger = logging.getLogger(__name__)


class DatabaseClient:
    """Database client for managing async connections"""

    def __init__(self, database_url: str = None):
        self.database_url = database_url or settings.database_url
        self.engine = None
        self.session_maker = None

    async def verify_connection(self):
        """Verify the database answers before creating tables."""
        if not self.engine:
            raise RuntimeError("Engine not initialized. Call initialize() first.")

        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")

    async def initialize(self):
        """Initialize database engine and create tables"""
        logger.info(f"Initializing database: {self.database_url.split('@')[-1]}")

        engine_kwargs = {"echo": False}
        if self.database_url.startswith("sqlite"):
            engine_kwargs["poolclass"] = NullPool
        self.engine = create_async_engine(self.database_url, **engine_kwargs)

        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        await self.verify_connection()

        # Note: Alembic migrations are the primary schema path; create_all()
        # keeps non-migrated development setups working
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database initialized successfully")

    async def close(self):
        """Close database connections"""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database connections closed")

    def get_session(self) -> AsyncSession:
        """Get database session"""
        if not self.session_maker:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self.session_maker()


# Global database client instance
db_client = DatabaseClient()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database session.

    Stores commit their own writes; anything still pending when the request
    fails is rolled back.
    """
    async with db_client.get_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
