"""Async database service with SQLModel and SQLAlchemy 2.0."""

import logging
from datetime import datetime
from typing import Any, List, Optional, Type
from sqlmodel import SQLModel, select
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from contextlib import asynccontextmanager

from model_expires.core.config import Settings
from model_expires.core.logging import configure_logging, get_logger, log_expiration_query
from model_expires.core.ttl import TTL
from model_expires.models.cache import CacheEntry
from model_expires.models.expirable import ExpirableMixin

logger = get_logger(__name__)


class Database:
    """Async database service with SQLModel."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = None
        self.async_session = None

    async def startup(self):
        """Initialize database connection and create tables."""
        configure_logging(self.settings)
        if not self.settings.database_echo:
            logging.getLogger("aiosqlite").setLevel(logging.WARNING)
            logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
            logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)

        try:
            engine_options = {"echo": self.settings.database_echo}
            if ":memory:" not in self.settings.database_url:
                engine_options["pool_size"] = self.settings.database_pool_size
                engine_options["max_overflow"] = self.settings.database_max_overflow

            self.engine = create_async_engine(self.settings.database_url, **engine_options)

            self.async_session = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )

            async with self.engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)

            logger.info("Database initialized successfully")

        except Exception as e:
            logger.error("Database startup failed", error=str(e))
            raise

    async def shutdown(self):
        """Close database connections."""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database connections closed")

    @asynccontextmanager
    async def get_session(self):
        """Get async database session."""
        if not self.async_session:
            raise RuntimeError("Database not initialized")

        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def save(self, record: SQLModel) -> bool:
        """Insert or update a record."""
        try:
            async with self.get_session() as session:
                await session.merge(record)
                await session.commit()
                return True

        except Exception as e:
            logger.error("Failed to save record", model=type(record).__name__, error=str(e))
            return False

    # ============================================================================
    # Expiration queries
    # ============================================================================

    async def _list(self, model: Type[ExpirableMixin], operation: str, stmt) -> List[Any]:
        try:
            async with self.get_session() as session:
                result = await session.execute(stmt)
                records = list(result.scalars().all())
                log_expiration_query(logger, operation, model.__name__, len(records))
                return records

        except Exception as e:
            logger.error("Failed to list records", operation=operation, model=model.__name__, error=str(e))
            return []

    async def list_expired(self, model: Type[ExpirableMixin], now: Optional[datetime] = None) -> List[Any]:
        """Records whose expiration time has been reached."""
        return await self._list(model, "expired", model.filter_expired(now=now))

    async def list_expiring(self, model: Type[ExpirableMixin], now: Optional[datetime] = None) -> List[Any]:
        """Records that will expire but have not yet."""
        return await self._list(model, "expiring", model.filter_expiring(now=now))

    async def list_not_expiring(self, model: Type[ExpirableMixin]) -> List[Any]:
        """Records without an expiration time."""
        return await self._list(model, "not_expiring", model.filter_not_expiring())

    async def list_unexpired(self, model: Type[ExpirableMixin], now: Optional[datetime] = None) -> List[Any]:
        """Everything except expired records."""
        return await self._list(model, "unexpired", model.filter_excluding_expired(now=now))

    async def count_expired(self, model: Type[ExpirableMixin], now: Optional[datetime] = None) -> int:
        """Count records whose expiration time has been reached."""
        try:
            async with self.get_session() as session:
                stmt = model.filter_expired(select(func.count()).select_from(model), now=now)
                result = await session.execute(stmt)
                return result.scalar_one()

        except Exception as e:
            logger.error("Failed to count expired records", model=model.__name__, error=str(e))
            return 0

    # ============================================================================
    # Cache Entries
    # ============================================================================

    async def get_cache_entry(self, key: str, now: Optional[datetime] = None) -> Optional[str]:
        """Get cache value by key. Returns None if expired or not found."""
        try:
            async with self.get_session() as session:
                stmt = CacheEntry.filter_excluding_expired(
                    select(CacheEntry).where(CacheEntry.key == key), now=now
                )
                result = await session.execute(stmt)
                entry = result.scalar_one_or_none()

                return entry.value if entry else None

        except Exception as e:
            logger.error("Failed to get cache entry", key=key, error=str(e))
            return None

    async def set_cache_entry(self, key: str, value: str, ttl: TTL = None) -> bool:
        """Set cache value with an optional TTL."""
        try:
            async with self.get_session() as session:
                stmt = select(CacheEntry).where(CacheEntry.key == key)
                result = await session.execute(stmt)
                existing = result.scalar_one_or_none()

                if existing:
                    existing.value = value
                    existing.created_at = CacheEntry.current_time()
                    existing.set_ttl(ttl, now=existing.created_at)
                else:
                    session.add(CacheEntry.create(key, value, ttl))

                await session.commit()
                return True

        except Exception as e:
            logger.error("Failed to set cache entry", key=key, error=str(e))
            return False

    async def delete_cache_entry(self, key: str) -> bool:
        """Delete an entry regardless of its expiration. True if a row was removed."""
        try:
            async with self.get_session() as session:
                result = await session.execute(delete(CacheEntry).where(CacheEntry.key == key))
                await session.commit()
                return result.rowcount > 0

        except Exception as e:
            logger.error("Failed to delete cache entry", key=key, error=str(e))
            return False

    async def cache_exists(self, key: str, now: Optional[datetime] = None) -> bool:
        """Check if cache key exists and is not expired."""
        try:
            async with self.get_session() as session:
                stmt = CacheEntry.filter_excluding_expired(
                    select(CacheEntry.key).where(CacheEntry.key == key), now=now
                )
                result = await session.execute(stmt)
                return result.scalar_one_or_none() is not None

        except Exception as e:
            logger.error("Failed to check cache exists", key=key, error=str(e))
            return False
