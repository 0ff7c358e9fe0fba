"""
Multi-entity clinic workflows.

``ClinicCoordinator`` owns the operations that span several tables or
need an atomic check-then-write: recording a visit together with the
services performed, booking an appointment slot, and the read-side
aggregates (vet availability, daily statistics, owner dashboard, full pet
history).
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from sqlalchemy.orm import selectinload

from .crud.engine import parse_record_id
from .crud.hooks import VISIT_HOOKS, validate_with_schema, visit_relations
from .database.store import EntityStore
from .events import ClinicEvent, NotificationSink, NullSink
from .exceptions import (
    DuplicateRecordException,
    SlotAlreadyBookedException,
    ValidationException,
    log_exception_context,
)
from .models import (
    Appointment,
    AppointmentStatus,
    Owner,
    Pet,
    Veterinarian,
    Visit,
    VisitService,
)
from .projection import (
    project_appointment,
    project_owner,
    project_pet,
    project_visit,
)
from .schemas import (
    SLOT_BUSY,
    SLOT_FREE,
    AppointmentCreate,
    AppointmentDTO,
    DailyStats,
    OwnerDashboard,
    PetHistory,
    SlotAvailability,
    VisitDTO,
    VisitServiceLink,
)
from .utils.datetime_utils import (
    CLINIC_TIME_SLOTS,
    day_bounds,
    format_calendar_date,
    get_current_utc,
)

logger = logging.getLogger(__name__)

DASHBOARD_LIMIT = 5

ServiceItem = Union[int, str, Mapping[str, Any]]


def _live_slot_filter(vet_id: int, start, end) -> List[Any]:
    return [
        Appointment.vet_id == vet_id,
        Appointment.date >= start,
        Appointment.date <= end,
        Appointment.status != AppointmentStatus.CANCELLED,
    ]


def parse_service_items(items: Optional[Iterable[ServiceItem]]) -> List[VisitServiceLink]:
    """
    Parse the services attached to a new visit.

    Items are either bare service ids or ``{"serviceId": 3, "notes": ...}``
    mappings.

    Raises:
        ValidationException: If an item has no valid service id
    """
    links = []
    for item in items or []:
        payload = item if isinstance(item, Mapping) else {"service_id": item}
        links.append(VisitServiceLink(**validate_with_schema(VisitServiceLink, payload)))
    return links


class ClinicCoordinator:
    """Transactional and aggregate clinic operations."""

    def __init__(self, store: EntityStore, sink: Optional[NotificationSink] = None):
        """
        Initialize the coordinator.

        Args:
            store: Persistence used for every operation
            sink: Receiver of notification events (discarded when omitted)
        """
        self.store = store
        self.sink = sink or NullSink()

    def _notify(self, event: ClinicEvent, payload: Dict[str, Any]) -> None:
        try:
            self.sink.notify(event, payload)
        except Exception as e:
            log_exception_context(e, {"event": event.value, **payload}, logger=logger)

    async def create_visit_with_services(
        self,
        visit_data: Mapping[str, Any],
        service_ids: Optional[Iterable[ServiceItem]] = None,
    ) -> VisitDTO:
        """
        Record a visit and the services performed during it atomically.

        Args:
            visit_data: Visit payload (petId, vetId, date, diagnosis, notes)
            service_ids: Service ids or ``{serviceId, notes}`` mappings

        Returns:
            The projected visit with pet, owner, vet and services loaded

        Raises:
            ValidationException: If the visit or a service item is invalid
            NotFoundException: If the pet, vet or a service does not exist;
                nothing is written in that case
        """
        values = VISIT_HOOKS.validate(visit_data, False)
        links = parse_service_items(service_ids)

        async with self.store.transaction() as tx:
            visit = await tx.create(Visit, values)
            for link in links:
                await tx.create(
                    VisitService,
                    {
                        "visit_id": visit.id,
                        "service_id": link.service_id,
                        "notes": link.notes,
                    },
                )
            visit = await tx.find_one(Visit, visit.id, visit_relations())

        logger.info(f"Created visit {visit.id} with {len(links)} service(s)")
        self._notify(
            ClinicEvent.VISIT_CREATED,
            {"id": visit.id, "pet_id": visit.pet_id, "services": len(links)},
        )
        return project_visit(visit)

    async def create_appointment(self, data: Mapping[str, Any]) -> AppointmentDTO:
        """
        Book an appointment if the vet's slot is free that day.

        The conflict check and the insert share one transaction, and a
        partial unique index on (vet, day, slot) over live appointments
        rejects a concurrent booking that passed the check.

        Raises:
            ValidationException: If the payload is invalid
            SlotAlreadyBookedException: If a non-cancelled appointment holds the slot
            NotFoundException: If the pet, vet or owner does not exist
        """
        values = validate_with_schema(AppointmentCreate, data)
        values["status"] = AppointmentStatus.SCHEDULED
        start, end = day_bounds(values["date"])
        day = start.date().isoformat()

        try:
            async with self.store.transaction() as tx:
                clash = await tx.find_first(
                    Appointment,
                    _live_slot_filter(values["vet_id"], start, end)
                    + [Appointment.time_slot == values["time_slot"]],
                )
                if clash is not None:
                    raise SlotAlreadyBookedException(
                        values["vet_id"], day, values["time_slot"]
                    )
                appointment = await tx.create(
                    Appointment,
                    values,
                    [
                        selectinload(Appointment.pet),
                        selectinload(Appointment.vet),
                        selectinload(Appointment.owner),
                    ],
                )
        except DuplicateRecordException as e:
            if e.details.get("field") != "time_slot":
                raise
            raise SlotAlreadyBookedException(values["vet_id"], day, values["time_slot"])

        logger.info(
            f"Booked appointment {appointment.id} for vet {appointment.vet_id} "
            f"on {day} at {appointment.time_slot}"
        )
        self._notify(
            ClinicEvent.APPOINTMENT_CREATED,
            {"id": appointment.id, "vet_id": appointment.vet_id, "day": day},
        )
        return project_appointment(appointment)

    async def get_vet_availability(self, vet_id: Any, date: Any) -> List[SlotAvailability]:
        """
        Report each canonical slot of a vet's day as free or busy.

        Returns:
            Exactly one entry per clinic slot, in slot order
        """
        vet_id = parse_record_id(vet_id)
        try:
            start, end = day_bounds(date)
        except ValueError:
            raise ValidationException("A valid date is required", field="date", value=date)

        booked = await self.store.find_many(
            Appointment, _live_slot_filter(vet_id, start, end)
        )
        taken = {appointment.time_slot for appointment in booked}
        return [
            SlotAvailability(slot=slot, status=SLOT_BUSY if slot in taken else SLOT_FREE)
            for slot in CLINIC_TIME_SLOTS
        ]

    async def get_daily_stats(self) -> DailyStats:
        """
        Count today's visits and scheduled appointments plus the clinic totals.

        The counts run concurrently on separate sessions, so they are not
        a consistent snapshot.
        """
        start, end = day_bounds(get_current_utc())
        (
            today_visits,
            upcoming_appointments,
            total_pets,
            total_owners,
            total_vets,
        ) = await asyncio.gather(
            self.store.count(Visit, [Visit.date >= start, Visit.date <= end]),
            self.store.count(
                Appointment,
                [
                    Appointment.date >= start,
                    Appointment.date <= end,
                    Appointment.status == AppointmentStatus.SCHEDULED,
                ],
            ),
            self.store.count(Pet),
            self.store.count(Owner),
            self.store.count(Veterinarian),
        )
        return DailyStats(
            today_visits=today_visits,
            upcoming_appointments=upcoming_appointments,
            total_pets=total_pets,
            total_owners=total_owners,
            total_vets=total_vets,
        )

    async def get_owner_dashboard(self, owner_id: Any) -> Optional[OwnerDashboard]:
        """
        Gather an owner's pets, next appointments and latest visits.

        Returns:
            The dashboard, or None when the owner does not exist
        """
        owner_id = parse_record_id(owner_id)
        owner = await self.store.find_one(
            Owner, owner_id, [selectinload(Owner.pets).selectinload(Pet.owner)]
        )
        if owner is None:
            return None

        pet_ids = [pet.id for pet in owner.pets]
        upcoming = await self.store.find_many(
            Appointment,
            [
                Appointment.owner_id == owner_id,
                Appointment.date >= get_current_utc(),
            ],
            relations=[
                selectinload(Appointment.pet),
                selectinload(Appointment.vet),
                selectinload(Appointment.owner),
            ],
            limit=DASHBOARD_LIMIT,
            order_by=[Appointment.date.asc(), Appointment.id.asc()],
        )
        recent = []
        if pet_ids:
            recent = await self.store.find_many(
                Visit,
                [Visit.pet_id.in_(pet_ids)],
                relations=visit_relations(),
                limit=DASHBOARD_LIMIT,
                order_by=[Visit.date.desc(), Visit.id.desc()],
            )

        return OwnerDashboard(
            owner=project_owner(owner),
            pets=[project_pet(pet) for pet in owner.pets],
            upcoming_appointments=[project_appointment(a) for a in upcoming],
            recent_visits=[project_visit(v) for v in recent],
        )

    async def get_full_pet_history(self, pet_id: Any) -> Optional[PetHistory]:
        """
        Fetch a pet with its owner and every visit, most recent first.

        Returns:
            The history, or None when the pet does not exist
        """
        pet_id = parse_record_id(pet_id)
        pet = await self.store.find_one(
            Pet, pet_id, [selectinload(Pet.owner).selectinload(Owner.pets)]
        )
        if pet is None:
            return None

        visits = await self.store.find_many(
            Visit,
            [Visit.pet_id == pet_id],
            relations=visit_relations(),
            order_by=[Visit.date.desc(), Visit.id.desc()],
        )
        logger.debug(
            f"Pet {pet_id} history: {len(visits)} visit(s), "
            f"latest {format_calendar_date(visits[0].date) if visits else None}"
        )
        return PetHistory(
            pet=project_pet(pet),
            owner=project_owner(pet.owner) if pet.owner is not None else None,
            visits=[project_visit(v) for v in visits],
        )
