"""
cache.py — Persistent cache of lookup results, one record per normalized username.

Backed by SQLAlchemy's asyncio engine:
  - sqlite+aiosqlite://...     (local / tests)
  - postgresql+asyncpg://...   (deployments)

The store is optional. Without DATABASE_URL, or while the database is
unreachable, is_ready() is False and lookups run uncached. A storage error
marks the store not-ready for STORE_RETRY_SECONDS; afterwards the pool is
allowed to reconnect on the next call.

Usage:
    store = CacheStore(DATABASE_URL)
    await store.connect()
    record = await store.get("octocat")
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from config import STORE_RETRY_SECONDS
from utils.utils import ensure_utc

logger = logging.getLogger(__name__)

# Dialects with a native INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "sqlite":     sqlite.insert,
    "postgresql": postgresql.insert,
}


class StoreUnavailableError(Exception):
    """Raised when the cache database cannot be read or written."""


# ─── Models ──────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


class CachedResultRow(Base):
    __tablename__ = "cached_results"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    profile: Mapped[dict] = mapped_column(JSON, nullable=False)
    repositories: Mapped[list] = mapped_column(JSON, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


@dataclass
class CachedResult:
    """Last known lookup result for a normalized username."""

    key: str
    profile: dict
    repositories: list[dict]
    summary: str
    fetched_at: datetime

    def is_fresh(self, now: datetime, ttl_seconds: float) -> bool:
        return now - self.fetched_at < timedelta(seconds=ttl_seconds)


# ─── Store ───────────────────────────────────────────────────────────────────

class CacheStore:
    """Process-wide handle on the cache database with an explicit readiness flag."""

    def __init__(self, database_url: str | None, retry_seconds: float = STORE_RETRY_SECONDS):
        self.database_url = database_url or ""
        self.retry_seconds = retry_seconds
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker | None = None
        self._insert = None
        self._schema_ready = False
        self._unavailable_until = 0.0

    async def connect(self) -> None:
        """
        Create the engine and the table. Failures are logged, never raised.
        An unreachable database only opens the back-off window; the table is
        created on the first get/upsert after it.
        """
        if not self.database_url:
            logger.warning("DATABASE_URL is not set – caching is disabled.")
            return

        try:
            engine = create_async_engine(self.database_url, pool_pre_ping=True)
        except (SQLAlchemyError, ImportError) as exc:
            logger.error(f"Invalid DATABASE_URL: {exc}. Caching is disabled.")
            return

        insert = _UPSERT_INSERTS.get(engine.dialect.name)
        if insert is None:
            await engine.dispose()
            logger.error(
                f"Unsupported cache database dialect '{engine.dialect.name}' – caching is disabled."
            )
            return

        self._engine = engine
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)
        self._insert = insert
        try:
            await self._ensure_schema()
        except (SQLAlchemyError, OSError) as exc:
            self._mark_unavailable(exc)
            return
        logger.info(f"Cache store connected ({engine.dialect.name}).")

    async def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self._schema_ready = True

    def is_ready(self) -> bool:
        """Non-blocking readiness check."""
        if self._engine is None:
            return False
        return time.monotonic() >= self._unavailable_until

    def _mark_unavailable(self, exc: Exception) -> None:
        self._unavailable_until = time.monotonic() + self.retry_seconds
        logger.warning(
            f"Cache store unavailable: {exc}. Retrying in {self.retry_seconds:.0f}s."
        )

    async def get(self, key: str) -> CachedResult | None:
        """Point lookup by normalized username. Returns None on a miss."""
        if self._sessions is None:
            raise StoreUnavailableError("Cache store is not connected.")
        try:
            await self._ensure_schema()
            async with self._sessions() as session:
                row = await session.get(CachedResultRow, key)
        except (SQLAlchemyError, OSError) as exc:
            self._mark_unavailable(exc)
            raise StoreUnavailableError(str(exc)) from exc

        if row is None:
            return None
        return CachedResult(
            key=row.key,
            profile=row.profile,
            repositories=row.repositories,
            summary=row.summary,
            fetched_at=ensure_utc(row.fetched_at),
        )

    async def upsert(self, record: CachedResult) -> None:
        """
        Insert or replace the record for record.key in one statement.
        A stored record with a newer fetched_at is kept (last writer wins on fetched_at).
        """
        if self._sessions is None:
            raise StoreUnavailableError("Cache store is not connected.")

        values = {
            "key": record.key,
            "profile": record.profile,
            "repositories": record.repositories,
            "summary": record.summary,
            "fetched_at": ensure_utc(record.fetched_at),
        }
        stmt = self._insert(CachedResultRow).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CachedResultRow.key],
            set_={
                "profile": stmt.excluded.profile,
                "repositories": stmt.excluded.repositories,
                "summary": stmt.excluded.summary,
                "fetched_at": stmt.excluded.fetched_at,
            },
            where=CachedResultRow.fetched_at <= stmt.excluded.fetched_at,
        )
        try:
            await self._ensure_schema()
            async with self._sessions() as session:
                await session.execute(stmt)
                await session.commit()
        except (SQLAlchemyError, OSError) as exc:
            self._mark_unavailable(exc)
            raise StoreUnavailableError(str(exc)) from exc
        logger.info(f"Cache record written for {record.key}")

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessions = None
