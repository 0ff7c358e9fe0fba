"""
Tests for database session management.
"""

import pytest
from sqlalchemy import select, text

from vetcare.database import session as session_module
from vetcare.database.session import (
    SessionManager,
    get_session_manager,
    initialize_session_manager,
)
from vetcare.models import Owner


class TestSessionManager:
    """Test cases for SessionManager."""

    @pytest.mark.asyncio
    async def test_initialize_database_creates_tables(self, session_manager):
        assert session_manager.is_initialized

        async with session_manager.get_session() as session:
            result = await session.execute(
                text("SELECT name FROM sqlite_master WHERE type='table'")
            )
            tables = {row[0] for row in result.fetchall()}

        assert {
            "owners",
            "pets",
            "vets",
            "services",
            "visits",
            "visit_services",
            "appointments",
            "users",
        } <= tables

    @pytest.mark.asyncio
    async def test_transaction_commits(self, session_manager):
        async with session_manager.get_transaction() as session:
            session.add(Owner(first_name="A", last_name="B", email="ab@example.lt", phone="", address=""))

        async with session_manager.get_session() as session:
            owners = (await session.execute(select(Owner))).scalars().all()

        assert [o.email for o in owners] == ["ab@example.lt"]

    @pytest.mark.asyncio
    async def test_transaction_rolls_back_on_error(self, session_manager):
        with pytest.raises(RuntimeError):
            async with session_manager.get_transaction() as session:
                session.add(Owner(first_name="A", last_name="B", email="x@example.lt", phone="", address=""))
                await session.flush()
                raise RuntimeError("abort")

        async with session_manager.get_session() as session:
            owners = (await session.execute(select(Owner))).scalars().all()

        assert owners == []

    @pytest.mark.asyncio
    async def test_health_check(self, session_manager):
        health = await session_manager.health_check()

        assert health["status"] == "healthy"
        assert health["checks"]["query"]["status"] == "pass"
        assert health["checks"]["schema"]["missing_tables"] == []

    @pytest.mark.asyncio
    async def test_health_check_reports_missing_tables(self, test_engine):
        manager = SessionManager(test_engine)

        health = await manager.health_check()

        assert health["status"] == "unhealthy"
        assert "appointments" in health["checks"]["schema"]["missing_tables"]
        assert not manager.is_initialized

    @pytest.mark.asyncio
    async def test_missing_tables_after_initialize(self, session_manager):
        assert await session_manager.missing_tables() == []

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, session_manager):
        assert await session_manager.initialize_database()

    @pytest.mark.asyncio
    async def test_close(self, session_manager):
        await session_manager.close()

        assert not session_manager.is_initialized


class TestGlobalSessionManager:
    """Test cases for the module-level session manager."""

    def test_uninitialized_raises(self, monkeypatch):
        monkeypatch.setattr(session_module, "_session_manager", None)

        with pytest.raises(RuntimeError, match="not initialized"):
            get_session_manager()

    @pytest.mark.asyncio
    async def test_initialize_and_use(self, monkeypatch, test_engine):
        monkeypatch.setattr(session_module, "_session_manager", None)

        manager = initialize_session_manager(test_engine)

        assert isinstance(manager, SessionManager)
        assert get_session_manager() is manager
        assert await session_module.initialize_database()
        async with session_module.get_session() as session:
            assert (await session.execute(text("SELECT 1"))).scalar_one() == 1
