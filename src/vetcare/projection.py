"""
DTO projection for clinic entities.

Pure functions turning ORM records (plus whatever relations were eagerly
loaded) into client-facing DTOs with derived fields. Relations that were
not loaded are treated as absent rather than fetched, so projections never
perform IO.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from .models import Appointment, Owner, Pet, Service, Veterinarian, Visit, VisitService
from .schemas import (
    AppointmentDTO,
    OwnerDTO,
    PetDTO,
    ServiceDTO,
    VeterinarianDTO,
    VisitDTO,
    VisitServiceDTO,
)
from .utils.datetime_utils import calculate_age_years, format_calendar_date

RecordT = TypeVar("RecordT")
DtoT = TypeVar("DtoT")


def _loaded(record: Any, relation: str) -> Optional[Any]:
    """Return a loaded relation value, or None when it was never loaded."""
    if record is None or not record.is_loaded(relation):
        return None
    return getattr(record, relation)


def _full_name(person: Optional[Any]) -> Optional[str]:
    if person is None:
        return None
    return f"{person.first_name} {person.last_name}"


def _money(value: Optional[Decimal]) -> float:
    return float(value) if value is not None else 0.0


def project_owner(owner: Owner) -> OwnerDTO:
    """Project an owner; ``pet_count`` is 0 unless pets were loaded."""
    pets = _loaded(owner, "pets")
    return OwnerDTO(
        id=owner.id,
        full_name=_full_name(owner),
        first_name=owner.first_name,
        last_name=owner.last_name,
        phone=owner.phone,
        email=owner.email,
        address=owner.address,
        pet_count=len(pets) if pets is not None else 0,
        created_at=format_calendar_date(owner.created_at),
    )


def project_pet(pet: Pet, today: Optional[date] = None) -> PetDTO:
    """
    Project a pet with its age in whole years.

    Args:
        pet: Pet record, optionally with ``owner`` loaded
        today: Reference date for the age (defaults to the current UTC date)
    """
    return PetDTO(
        id=pet.id,
        name=pet.name,
        species=pet.species,
        breed=pet.breed or "",
        birth_date=format_calendar_date(pet.birth_date),
        age=calculate_age_years(pet.birth_date, today),
        gender=pet.gender or "",
        owner_id=pet.owner_id,
        owner_full_name=_full_name(_loaded(pet, "owner")),
        created_at=format_calendar_date(pet.created_at),
    )


def project_vet(vet: Veterinarian) -> VeterinarianDTO:
    full_name = _full_name(vet)
    return VeterinarianDTO(
        id=vet.id,
        name=full_name,
        full_name=full_name,
        first_name=vet.first_name,
        last_name=vet.last_name,
        specialty=vet.specialty or "",
        phone=vet.phone or "",
        email=vet.email,
        created_at=format_calendar_date(vet.created_at),
    )


def project_service(service: Service) -> ServiceDTO:
    return ServiceDTO(
        id=service.id,
        name=service.name,
        description=service.description or "",
        price=_money(service.price),
        category=service.category,
        created_at=format_calendar_date(service.created_at),
    )


def project_visit_service(link: VisitService) -> VisitServiceDTO:
    """Project one visit/service link; an unloaded service has no name and costs 0."""
    service = _loaded(link, "service")
    return VisitServiceDTO(
        id=link.id,
        service_id=link.service_id,
        name=service.name if service is not None else None,
        price=_money(service.price) if service is not None else 0.0,
        notes=link.notes,
    )


def project_visit(visit: Visit) -> VisitDTO:
    """
    Project a visit with flattened names and its total cost.

    ``total_cost`` is the sum of the projected service prices, so a service
    that did not load counts as 0.
    """
    pet = _loaded(visit, "pet")
    links = _loaded(visit, "services") or []
    services = [project_visit_service(link) for link in links]
    total = sum((Decimal(str(item.price)) for item in services), Decimal("0"))

    return VisitDTO(
        id=visit.id,
        date=format_calendar_date(visit.date),
        diagnosis=visit.diagnosis,
        notes=visit.notes,
        pet_id=visit.pet_id,
        pet_name=pet.name if pet is not None else None,
        owner_full_name=_full_name(_loaded(pet, "owner")),
        vet_id=visit.vet_id,
        vet_full_name=_full_name(_loaded(visit, "vet")),
        services=services,
        total_cost=float(total),
        created_at=format_calendar_date(visit.created_at),
    )


def project_appointment(appointment: Appointment) -> AppointmentDTO:
    pet = _loaded(appointment, "pet")
    status = appointment.status
    return AppointmentDTO(
        id=appointment.id,
        date=format_calendar_date(appointment.date),
        time_slot=appointment.time_slot,
        status=status.value if hasattr(status, "value") else status,
        notes=appointment.notes,
        pet_id=appointment.pet_id,
        pet_name=pet.name if pet is not None else None,
        vet_id=appointment.vet_id,
        vet_full_name=_full_name(_loaded(appointment, "vet")),
        owner_id=appointment.owner_id,
        owner_full_name=_full_name(_loaded(appointment, "owner")),
        created_at=format_calendar_date(appointment.created_at),
    )


def project_many(
    project_one: Callable[[RecordT], DtoT], records: Iterable[RecordT]
) -> List[DtoT]:
    """Project every record with the given single-record projection."""
    return [project_one(record) for record in records]
