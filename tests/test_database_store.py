"""
Tests for the entity store.

Covers the basic persistence operations, constraint translation and
transaction atomicity against a real SQLite database.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.orm import selectinload

from vetcare.database.store import EntityStore, entity_label
from vetcare.exceptions import (
    DuplicateRecordException,
    NotFoundException,
    ReferenceConflictException,
)
from vetcare.models import (
    AppointmentStatus,
    Owner,
    Pet,
    Service,
    Veterinarian,
    Visit,
    VisitService,
)


class TestEntityLabel:
    def test_labels(self):
        assert entity_label(Owner) == "Owner"
        assert entity_label(Veterinarian) == "Vet"
        assert entity_label(VisitService) == "Visit service"


@pytest.mark.integration
class TestStoreOperations:
    """Create, read, update and delete through the store."""

    @pytest.mark.asyncio
    async def test_create_and_find(self, store, owner_factory):
        owner = await owner_factory.create(store, first_name="Jonas")

        assert owner.id is not None
        assert owner.created_at.tzinfo is not None

        found = await store.find_one(Owner, owner.id)
        assert found.first_name == "Jonas"

    @pytest.mark.asyncio
    async def test_find_one_missing_returns_none(self, store):
        assert await store.find_one(Owner, 999) is None

    @pytest.mark.asyncio
    async def test_create_loads_requested_relations(self, store, owner_factory):
        owner = await owner_factory.create(store)

        pet = await store.create(
            Pet,
            {"owner_id": owner.id, "name": "Reksas", "species": "Šuo"},
            [selectinload(Pet.owner)],
        )

        assert pet.is_loaded("owner")
        assert pet.owner.id == owner.id
        assert pet.breed == ""
        assert pet.gender == "unknown"

    @pytest.mark.asyncio
    async def test_find_many_with_filters_paging_and_order(self, store, owner_factory):
        for name in ("Bella", "Amber", "Ciko"):
            await owner_factory.create(store, first_name=name)

        page = await store.find_many(
            Owner, order_by=[Owner.first_name.asc()], offset=1, limit=1
        )
        filtered = await store.find_many(Owner, [Owner.first_name == "Ciko"])

        assert [o.first_name for o in page] == ["Bella"]
        assert [o.first_name for o in filtered] == ["Ciko"]
        assert await store.count(Owner) == 3
        assert await store.count(Owner, [Owner.first_name != "Ciko"]) == 2

    @pytest.mark.asyncio
    async def test_update_only_touches_given_fields(self, store, owner_factory):
        owner = await owner_factory.create(store, phone="111", address="Kaunas")

        updated = await store.update(Owner, owner.id, {"phone": "222"})

        assert updated.phone == "222"
        assert updated.address == "Kaunas"

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self, store):
        with pytest.raises(NotFoundException) as exc_info:
            await store.update(Owner, 404, {"phone": "1"})

        assert exc_info.value.message == "Owner not found"

    @pytest.mark.asyncio
    async def test_delete(self, store, owner_factory):
        owner = await owner_factory.create(store)

        await store.delete(Owner, owner.id)

        assert await store.find_one(Owner, owner.id) is None

    @pytest.mark.asyncio
    async def test_delete_missing_raises_not_found(self, store):
        with pytest.raises(NotFoundException):
            await store.delete(Service, 12345)

    @pytest.mark.asyncio
    async def test_datetimes_round_trip_as_utc(self, store, pet_factory, vet_factory):
        pet = await pet_factory.create(store)
        vet = await vet_factory.create(store)
        moment = datetime(2025, 3, 10, 23, 30, tzinfo=timezone.utc)

        visit = await store.create(
            Visit, {"pet_id": pet.id, "vet_id": vet.id, "date": moment, "diagnosis": "x"}
        )
        found = await store.find_one(Visit, visit.id)

        assert found.date == moment
        assert found.date.tzinfo is not None


@pytest.mark.integration
class TestConstraintTranslation:
    """IntegrityErrors become clinic exceptions."""

    @pytest.mark.asyncio
    async def test_duplicate_email(self, store, owner_factory):
        await owner_factory.create(store, email="dup@example.lt")

        with pytest.raises(DuplicateRecordException) as exc_info:
            await owner_factory.create(store, email="dup@example.lt")

        assert exc_info.value.details["field"] == "email"
        assert exc_info.value.status_hint == 409

    @pytest.mark.asyncio
    async def test_unknown_foreign_key_on_create(self, store):
        with pytest.raises(NotFoundException) as exc_info:
            await store.create(Pet, {"owner_id": 999, "name": "Rex", "species": "Šuo"})

        assert "references a record that does not exist" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_delete_referenced_owner(self, store, pet_factory):
        pet = await pet_factory.create(store)

        with pytest.raises(ReferenceConflictException):
            await store.delete(Owner, pet.owner_id)

        assert await store.find_one(Owner, pet.owner_id) is not None

    @pytest.mark.asyncio
    async def test_delete_visit_with_services_conflicts(
        self, store, pet_factory, vet_factory, service_factory, visit_factory
    ):
        pet = await pet_factory.create(store)
        vet = await vet_factory.create(store)
        service = await service_factory.create(store)
        visit = await visit_factory.create(store, pet, vet, services=[service])

        with pytest.raises(ReferenceConflictException):
            await store.delete(Visit, visit.id)

    @pytest.mark.asyncio
    async def test_live_slot_is_unique(
        self, store, pet_factory, vet_factory, appointment_factory
    ):
        pet = await pet_factory.create(store)
        vet = await vet_factory.create(store)
        await appointment_factory.create(store, pet, vet)

        with pytest.raises(DuplicateRecordException) as exc_info:
            await appointment_factory.create(store, pet, vet)

        assert exc_info.value.details["field"] == "time_slot"

    @pytest.mark.asyncio
    async def test_cancelled_slot_can_be_rebooked(
        self, store, pet_factory, vet_factory, appointment_factory
    ):
        pet = await pet_factory.create(store)
        vet = await vet_factory.create(store)
        await appointment_factory.create(store, pet, vet, status=AppointmentStatus.CANCELLED)

        rebooked = await appointment_factory.create(store, pet, vet)

        assert rebooked.status is AppointmentStatus.SCHEDULED


@pytest.mark.integration
class TestStoreTransactions:
    """Multi-write atomicity."""

    @pytest.mark.asyncio
    async def test_transaction_commits_all_writes(self, store, pet_factory, vet_factory):
        pet = await pet_factory.create(store)
        vet = await vet_factory.create(store)

        async with store.transaction() as tx:
            assert tx.in_transaction
            service = await tx.create(Service, {"name": "Exam", "price": Decimal("10")})
            visit = await tx.create(
                Visit,
                {
                    "pet_id": pet.id,
                    "vet_id": vet.id,
                    "date": datetime(2025, 3, 10, tzinfo=timezone.utc),
                    "diagnosis": "ok",
                },
            )
            await tx.create(VisitService, {"visit_id": visit.id, "service_id": service.id})

        assert await store.count(VisitService) == 1

    @pytest.mark.asyncio
    async def test_transaction_rolls_back_everything(
        self, store, pet_factory, vet_factory
    ):
        pet = await pet_factory.create(store)
        vet = await vet_factory.create(store)

        with pytest.raises(NotFoundException):
            async with store.transaction() as tx:
                visit = await tx.create(
                    Visit,
                    {
                        "pet_id": pet.id,
                        "vet_id": vet.id,
                        "date": datetime(2025, 3, 10, tzinfo=timezone.utc),
                        "diagnosis": "ok",
                    },
                )
                await tx.create(VisitService, {"visit_id": visit.id, "service_id": 777})

        assert await store.count(Visit) == 0
        assert await store.count(VisitService) == 0

    @pytest.mark.asyncio
    async def test_nested_transaction_joins_outer(self, store, owner_factory):
        with pytest.raises(RuntimeError):
            async with store.transaction() as outer:
                async with outer.transaction() as inner:
                    assert inner is outer
                    await owner_factory.create(inner)
                raise RuntimeError("abort outer")

        assert await store.count(Owner) == 0

    @pytest.mark.asyncio
    async def test_unbound_store(self, session_manager):
        assert not EntityStore(session_manager).in_transaction

