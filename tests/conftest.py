"""
Pytest configuration and fixtures for vetcare tests.

This module provides common fixtures for all tests in the vetcare
package: a temporary-file SQLite database per test, the session manager
and entity store on top of it, and factory classes for clinic records.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from vetcare.database.connection import create_engine
from vetcare.database.session import SessionManager
from vetcare.database.store import EntityStore
from vetcare.events import EventCounter
from vetcare.models import (
    Appointment,
    AppointmentStatus,
    Owner,
    Pet,
    Service,
    User,
    Veterinarian,
    Visit,
    VisitService,
)
from vetcare.utils.config import ClinicSettings


@pytest_asyncio.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Create an engine on a temporary SQLite file.

    A file (rather than ``:memory:``) lets the separate sessions used by
    concurrent reads see the same tables.
    """
    database_file = tmp_path / "vetcare_test.db"
    engine = create_engine(f"sqlite+aiosqlite:///{database_file}", echo=False)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_manager(
    test_engine: AsyncEngine,
) -> AsyncGenerator[SessionManager, None]:
    """Create a session manager with the clinic schema in place."""
    manager = SessionManager(test_engine)
    initialized = await manager.initialize_database()
    assert initialized, "Test database could not be initialized"
    yield manager


@pytest.fixture
def store(session_manager: SessionManager) -> EntityStore:
    """Unbound entity store on the test database."""
    return EntityStore(session_manager)


@pytest.fixture
def event_counter() -> EventCounter:
    return EventCounter()


@pytest.fixture
def settings() -> ClinicSettings:
    """Settings with fast bcrypt hashing for tests."""
    return ClinicSettings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret="test-secret-with-enough-length-for-hs256",
        bcrypt_rounds=4,
    )


# Factory classes for creating test records
class OwnerFactory:
    """Factory for creating test Owner records."""

    @staticmethod
    def values(**kwargs) -> dict:
        defaults = {
            "first_name": "Jonas",
            "last_name": "Jonaitis",
            "phone": "+37060000000",
            "email": f"owner_{uuid.uuid4().hex[:8]}@example.com",
            "address": "Gedimino pr. 1, Vilnius",
        }
        defaults.update(kwargs)
        return defaults

    @staticmethod
    async def create(store: EntityStore, **kwargs) -> Owner:
        """Create and save an Owner record."""
        return await store.create(Owner, OwnerFactory.values(**kwargs))


class PetFactory:
    """Factory for creating test Pet records."""

    @staticmethod
    async def create(
        store: EntityStore, owner: Optional[Owner] = None, **kwargs
    ) -> Pet:
        """Create and save a Pet, creating an owner when none is given."""
        if owner is None:
            owner = await OwnerFactory.create(store)
        defaults = {
            "owner_id": owner.id,
            "name": f"Pet_{uuid.uuid4().hex[:6]}",
            "species": "Šuo",
            "breed": "Labradoras",
            "birth_date": date(2020, 6, 1),
            "gender": "male",
        }
        defaults.update(kwargs)
        return await store.create(Pet, defaults)


class VeterinarianFactory:
    """Factory for creating test Veterinarian records."""

    @staticmethod
    async def create(store: EntityStore, **kwargs) -> Veterinarian:
        defaults = {
            "first_name": "Ona",
            "last_name": "Onaitė",
            "specialty": "Surgery",
            "phone": "+37061111111",
            "email": f"vet_{uuid.uuid4().hex[:8]}@example.com",
        }
        defaults.update(kwargs)
        return await store.create(Veterinarian, defaults)


class ServiceFactory:
    """Factory for creating test Service records."""

    @staticmethod
    async def create(store: EntityStore, **kwargs) -> Service:
        defaults = {
            "name": f"Service {uuid.uuid4().hex[:6]}",
            "description": "",
            "price": Decimal("25.00"),
            "category": "general",
        }
        defaults.update(kwargs)
        return await store.create(Service, defaults)


class VisitFactory:
    """Factory for creating test Visit records."""

    @staticmethod
    async def create(
        store: EntityStore,
        pet: Pet,
        vet: Veterinarian,
        services: Optional[list] = None,
        **kwargs,
    ) -> Visit:
        defaults = {
            "pet_id": pet.id,
            "vet_id": vet.id,
            "date": datetime(2025, 3, 10, 9, 30, tzinfo=timezone.utc),
            "diagnosis": "Healthy",
        }
        defaults.update(kwargs)
        visit = await store.create(Visit, defaults)
        for service in services or []:
            await store.create(
                VisitService, {"visit_id": visit.id, "service_id": service.id}
            )
        return visit


class AppointmentFactory:
    """Factory for creating test Appointment records."""

    @staticmethod
    async def create(
        store: EntityStore, pet: Pet, vet: Veterinarian, **kwargs
    ) -> Appointment:
        defaults = {
            "pet_id": pet.id,
            "vet_id": vet.id,
            "owner_id": pet.owner_id,
            "date": datetime(2025, 4, 10, 11, 0, tzinfo=timezone.utc),
            "time_slot": "11:00",
            "status": AppointmentStatus.SCHEDULED,
        }
        defaults.update(kwargs)
        return await store.create(Appointment, defaults)


class UserFactory:
    """Factory for creating test User records."""

    @staticmethod
    async def create(store: EntityStore, password_hash: str, **kwargs) -> User:
        defaults = {
            "email": f"staff_{uuid.uuid4().hex[:8]}@example.com",
            "password_hash": password_hash,
            "name": "Front Desk",
        }
        defaults.update(kwargs)
        return await store.create(User, defaults)


# Fixtures for factories
@pytest.fixture
def owner_factory():
    return OwnerFactory


@pytest.fixture
def pet_factory():
    return PetFactory


@pytest.fixture
def vet_factory():
    return VeterinarianFactory


@pytest.fixture
def service_factory():
    return ServiceFactory


@pytest.fixture
def visit_factory():
    return VisitFactory


@pytest.fixture
def appointment_factory():
    return AppointmentFactory


@pytest.fixture
def user_factory():
    return UserFactory
