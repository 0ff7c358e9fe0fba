"""
Session handling for the clinic database.

``SessionManager`` hands out async sessions and transactions to the
entity store, creates the clinic schema and reports whether the database
is reachable and complete. A process-wide manager can be registered with
``initialize_session_manager`` for code that has no store injected.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

from sqlalchemy import MetaData, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)


def _clinic_metadata() -> MetaData:
    from ..models import Base

    return Base.metadata


class SessionManager:
    """Source of sessions and transactions for one engine."""

    def __init__(
        self, engine: AsyncEngine, session_options: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            engine: Async engine from ``create_engine``
            session_options: Extra ``async_sessionmaker`` keyword arguments
        """
        self.engine = engine
        self._schema_ready = False

        # Projections read attributes after commit, so objects must not expire
        options = {"expire_on_commit": False, "autoflush": True}
        options.update(session_options or {})
        self.session_factory = async_sessionmaker(
            bind=engine, class_=AsyncSession, **options
        )

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session that is rolled back on error and always closed.

        Example:
            async with manager.get_session() as session:
                owners = (await session.execute(select(Owner))).scalars().all()
        """
        session = self.session_factory()
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.debug(f"Rolled back session after error: {e}")
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def get_transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session inside a transaction committed when the block exits cleanly."""
        async with self.get_session() as session:
            async with session.begin():
                yield session

    async def missing_tables(self, metadata: Optional[MetaData] = None) -> List[str]:
        """Names of the clinic tables that do not exist yet."""
        metadata = metadata if metadata is not None else _clinic_metadata()
        async with self.engine.connect() as conn:
            existing = await conn.run_sync(
                lambda sync_conn: set(inspect(sync_conn).get_table_names())
            )
        return sorted(name for name in metadata.tables if name not in existing)

    async def health_check(self) -> Dict[str, Any]:
        """
        Check connectivity and that every clinic table exists.

        Returns:
            ``{"status": "healthy" | "unhealthy", "checks": {...}}`` where
            ``checks`` holds the query latency in milliseconds and the list
            of missing tables
        """
        health: Dict[str, Any] = {"status": "healthy", "checks": {}}
        started = time.perf_counter()
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
            health["checks"]["query"] = {
                "status": "pass",
                "response_ms": round((time.perf_counter() - started) * 1000, 2),
            }
            missing = await self.missing_tables()
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            health["status"] = "unhealthy"
            health["checks"]["query"] = {"status": "fail", "error": str(e)}
            return health

        health["checks"]["schema"] = {
            "status": "pass" if not missing else "fail",
            "missing_tables": missing,
        }
        if missing:
            health["status"] = "unhealthy"
        return health

    async def initialize_database(self, metadata: Optional[MetaData] = None) -> bool:
        """
        Create any missing clinic tables.

        Args:
            metadata: Metadata to create; defaults to the clinic models

        Returns:
            True when the schema is in place, False if creation failed
        """
        metadata = metadata if metadata is not None else _clinic_metadata()
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        except SQLAlchemyError as e:
            logger.error(f"Creating the clinic schema failed: {e}")
            return False

        logger.info(f"Clinic schema ready ({len(metadata.tables)} tables)")
        self._schema_ready = True
        return True

    async def close(self) -> None:
        """Dispose of the engine's pooled connections."""
        await self.engine.dispose()
        self._schema_ready = False
        logger.info("Database connections closed")

    @property
    def is_initialized(self) -> bool:
        return self._schema_ready


_session_manager: Optional[SessionManager] = None


def initialize_session_manager(engine: AsyncEngine) -> SessionManager:
    """Register the process-wide session manager for ``engine``."""
    global _session_manager
    _session_manager = SessionManager(engine)
    logger.info("Session manager initialized")
    return _session_manager


def get_session_manager() -> SessionManager:
    """
    Return the process-wide session manager.

    Raises:
        RuntimeError: If ``initialize_session_manager`` has not been called
    """
    if _session_manager is None:
        raise RuntimeError(
            "Session manager not initialized. Call initialize_session_manager() first."
        )
    return _session_manager


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with get_session_manager().get_session() as session:
        yield session


@asynccontextmanager
async def get_transaction() -> AsyncGenerator[AsyncSession, None]:
    async with get_session_manager().get_transaction() as session:
        yield session


async def health_check() -> Dict[str, Any]:
    return await get_session_manager().health_check()


async def initialize_database(metadata: Optional[MetaData] = None) -> bool:
    """Create the clinic tables through the process-wide manager."""
    return await get_session_manager().initialize_database(metadata)
