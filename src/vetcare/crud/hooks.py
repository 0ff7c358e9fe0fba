"""
Per-entity hook configurations for the CRUD engine.

Each clinic entity gets an ``EntityHooks`` instance describing how its
list filters are built, which relations are loaded, how input is
validated and normalized, which events are emitted and which deletes are
refused. ``get_entity_hooks`` selects a configuration by entity name.
"""

import functools
import logging
from typing import Any, Dict, List, Mapping, Optional, Type

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import ColumnElement, func, or_
from sqlalchemy.orm import selectinload

from ..database.store import EntityStore
from ..events import ClinicEvent, NotificationSink
from ..exceptions import (
    DeleteGuardException,
    NotFoundException,
    ValidationException,
    format_validation_errors,
    summarize_validation_errors,
)
from ..models import (
    Appointment,
    AppointmentStatus,
    Owner,
    Pet,
    Service,
    Veterinarian,
    Visit,
    VisitService,
)
from ..projection import (
    project_appointment,
    project_many,
    project_owner,
    project_pet,
    project_service,
    project_vet,
    project_visit,
)
from ..schemas import (
    AppointmentCreate,
    AppointmentUpdate,
    InputSchema,
    OwnerCreate,
    OwnerUpdate,
    PetCreate,
    PetUpdate,
    ServiceCreate,
    ServiceUpdate,
    VeterinarianCreate,
    VeterinarianUpdate,
    VisitCreate,
    VisitUpdate,
)
from ..sorting import SortDirection
from ..utils.datetime_utils import day_bounds, parse_datetime
from ..utils.validation import sanitize_string, validate_record_id
from .engine import EntityHooks

logger = logging.getLogger(__name__)


# Input validation


def validate_with_schema(
    schema: Type[InputSchema], data: Any, partial: bool = False
) -> Dict[str, Any]:
    """
    Validate a payload against a schema and return model-ready values.

    Args:
        schema: Create or update schema
        data: Raw payload (camelCase or snake_case keys)
        partial: Keep only the fields present in the payload

    Returns:
        Validated values keyed by model attribute name

    Raises:
        ValidationException: With per-field messages in ``validation_errors``
    """
    if not isinstance(data, Mapping):
        raise ValidationException("Request body must be an object")
    try:
        parsed = schema.model_validate(dict(data))
    except PydanticValidationError as e:
        errors = format_validation_errors(e.errors())
        raise ValidationException(
            summarize_validation_errors(errors), validation_errors=errors
        )
    return parsed.model_dump(exclude_unset=partial)


def schema_validator(create_schema: Type[InputSchema], update_schema: Type[InputSchema]):
    """Build a ``validate(data, partial)`` hook from a create/update schema pair."""

    def validate(data: Mapping[str, Any], partial: bool) -> Dict[str, Any]:
        schema = update_schema if partial else create_schema
        return validate_with_schema(schema, data, partial)

    return validate


def trim_strings(data: Dict[str, Any]) -> Dict[str, Any]:
    """Collapse whitespace in every string value."""
    return {
        key: sanitize_string(value) if isinstance(value, str) else value
        for key, value in data.items()
    }


# Filter helpers


def _param(params: Mapping[str, Any], *names: str) -> Optional[Any]:
    for name in names:
        value = params.get(name)
        if value is not None and value != "":
            return value
    return None


def _id_filter(params: Mapping[str, Any], column, snake: str, camel: str) -> List[Any]:
    value = _param(params, snake, camel)
    if value is None:
        return []
    try:
        return [column == validate_record_id(value, camel)]
    except ValueError as e:
        raise ValidationException(str(e), field=camel, value=value)


def _contains_ci(column, term: str) -> ColumnElement[bool]:
    return func.lower(column).contains(term.lower(), autoescape=True)


def _search_filter(params: Mapping[str, Any], *columns) -> List[Any]:
    term = _param(params, "search", "q")
    if term is None or not str(term).strip():
        return []
    term = str(term).strip()
    return [or_(*(_contains_ci(column, term) for column in columns))]


def _equals_ci_filter(params: Mapping[str, Any], column, name: str) -> List[Any]:
    value = _param(params, name)
    if value is None or not str(value).strip():
        return []
    return [func.lower(column) == str(value).strip().lower()]


def _date_range_filter(params: Mapping[str, Any], column) -> List[Any]:
    """
    Build ``from``/``to`` bounds on a timestamp column.

    A bare calendar date as ``to`` includes that whole UTC day.
    """
    clauses = []
    start = _param(params, "from", "date_from", "dateFrom")
    end = _param(params, "to", "date_to", "dateTo")
    try:
        if start is not None:
            clauses.append(column >= parse_datetime(start))
        if end is not None:
            if isinstance(end, str) and "T" not in end.strip():
                clauses.append(column <= day_bounds(end)[1])
            else:
                clauses.append(column <= parse_datetime(end))
    except ValueError:
        raise ValidationException("A valid date range is required", field="from/to")
    return clauses


# Side effects


def _emit(event: ClinicEvent, **payload: Any):
    def hook(record: Any, sink: NotificationSink) -> None:
        sink.notify(event, {"id": record.id, **payload})

    return hook


def _record_updated(entity: str):
    return _emit(ClinicEvent.RECORD_UPDATED, entity=entity)


# Owner


def build_owner_filter(params: Mapping[str, Any]) -> List[Any]:
    return _search_filter(params, Owner.first_name, Owner.last_name, Owner.email)


def owner_relations():
    return [selectinload(Owner.pets)]


def _owner_registered(owner: Owner, sink: NotificationSink) -> None:
    sink.notify(
        ClinicEvent.OWNER_REGISTERED,
        {"id": owner.id, "full_name": owner.full_name, "email": owner.email},
    )


OWNER_HOOKS = EntityHooks(
    name="owner",
    label="Owner",
    model=Owner,
    build_filter=build_owner_filter,
    project_one=project_owner,
    project_many=functools.partial(project_many, project_owner),
    relations=owner_relations,
    validate=schema_validator(OwnerCreate, OwnerUpdate),
    normalize_input=trim_strings,
    after_create=_owner_registered,
    after_update=_record_updated("owner"),
)


# Pet


def build_pet_filter(params: Mapping[str, Any]) -> List[Any]:
    return (
        _id_filter(params, Pet.owner_id, "owner_id", "ownerId")
        + _equals_ci_filter(params, Pet.species, "species")
        + _search_filter(params, Pet.name)
    )


def pet_relations():
    return [selectinload(Pet.owner)]


def _pet_registered(pet: Pet, sink: NotificationSink) -> None:
    sink.notify(
        ClinicEvent.PET_REGISTERED,
        {"id": pet.id, "name": pet.name, "owner_id": pet.owner_id},
    )


PET_HOOKS = EntityHooks(
    name="pet",
    label="Pet",
    model=Pet,
    build_filter=build_pet_filter,
    project_one=project_pet,
    project_many=functools.partial(project_many, project_pet),
    relations=pet_relations,
    validate=schema_validator(PetCreate, PetUpdate),
    normalize_input=trim_strings,
    after_create=_pet_registered,
    after_update=_record_updated("pet"),
)


# Vet


def build_vet_filter(params: Mapping[str, Any]) -> List[Any]:
    return _search_filter(
        params,
        Veterinarian.first_name,
        Veterinarian.last_name,
        Veterinarian.specialty,
    )


VET_HOOKS = EntityHooks(
    name="vet",
    label="Vet",
    model=Veterinarian,
    build_filter=build_vet_filter,
    project_one=project_vet,
    project_many=functools.partial(project_many, project_vet),
    validate=schema_validator(VeterinarianCreate, VeterinarianUpdate),
    normalize_input=trim_strings,
    after_update=_record_updated("vet"),
)


# Service


def build_service_filter(params: Mapping[str, Any]) -> List[Any]:
    return _equals_ci_filter(params, Service.category, "category") + _search_filter(
        params, Service.name
    )


SERVICE_HOOKS = EntityHooks(
    name="service",
    label="Service",
    model=Service,
    build_filter=build_service_filter,
    project_one=project_service,
    project_many=functools.partial(project_many, project_service),
    validate=schema_validator(ServiceCreate, ServiceUpdate),
    normalize_input=trim_strings,
    after_update=_record_updated("service"),
)


# Visit


def build_visit_filter(params: Mapping[str, Any]) -> List[Any]:
    return (
        _id_filter(params, Visit.pet_id, "pet_id", "petId")
        + _id_filter(params, Visit.vet_id, "vet_id", "vetId")
        + _date_range_filter(params, Visit.date)
    )


def visit_relations():
    return [
        selectinload(Visit.pet).selectinload(Pet.owner),
        selectinload(Visit.vet),
        selectinload(Visit.services).selectinload(VisitService.service),
    ]


def visit_order():
    return [Visit.date.desc(), Visit.id.desc()]


VISIT_HOOKS = EntityHooks(
    name="visit",
    label="Visit",
    model=Visit,
    build_filter=build_visit_filter,
    project_one=project_visit,
    project_many=functools.partial(project_many, project_visit),
    relations=visit_relations,
    validate=schema_validator(VisitCreate, VisitUpdate),
    after_create=_emit(ClinicEvent.VISIT_CREATED),
    after_update=_record_updated("visit"),
    order_by=visit_order,
    default_sort="date",
    default_direction=SortDirection.DESC,
)


# Appointment


def build_appointment_filter(params: Mapping[str, Any]) -> List[Any]:
    clauses = (
        _id_filter(params, Appointment.vet_id, "vet_id", "vetId")
        + _id_filter(params, Appointment.owner_id, "owner_id", "ownerId")
        + _id_filter(params, Appointment.pet_id, "pet_id", "petId")
    )
    status = _param(params, "status")
    if status is not None:
        normalized = str(status).strip().lower()
        if normalized not in AppointmentStatus.values():
            raise ValidationException(
                f"status must be one of: {', '.join(AppointmentStatus.values())}",
                field="status",
                value=status,
            )
        clauses.append(Appointment.status == AppointmentStatus(normalized))
    return clauses + _date_range_filter(params, Appointment.date)


def appointment_relations():
    return [
        selectinload(Appointment.pet),
        selectinload(Appointment.vet),
        selectinload(Appointment.owner),
    ]


def appointment_order():
    return [Appointment.date.asc(), Appointment.time_slot.asc(), Appointment.id.asc()]


async def guard_scheduled_appointment(store: EntityStore, record_id: int) -> None:
    """Refuse to delete an appointment that is still scheduled."""
    appointment = await store.find_one(Appointment, record_id)
    if appointment is None:
        raise NotFoundException("Appointment", record_id)
    if appointment.status == AppointmentStatus.SCHEDULED:
        raise DeleteGuardException(
            "Cannot delete a scheduled appointment. Cancel it first.",
            rule_name="scheduled_appointment",
        )


APPOINTMENT_HOOKS = EntityHooks(
    name="appointment",
    label="Appointment",
    model=Appointment,
    build_filter=build_appointment_filter,
    project_one=project_appointment,
    project_many=functools.partial(project_many, project_appointment),
    relations=appointment_relations,
    validate=schema_validator(AppointmentCreate, AppointmentUpdate),
    after_create=_emit(ClinicEvent.APPOINTMENT_CREATED),
    after_update=_record_updated("appointment"),
    before_delete=guard_scheduled_appointment,
    order_by=appointment_order,
    default_sort="date",
)


ENTITY_HOOKS: Dict[str, EntityHooks] = {
    hooks.name: hooks
    for hooks in (
        OWNER_HOOKS,
        PET_HOOKS,
        VET_HOOKS,
        SERVICE_HOOKS,
        VISIT_HOOKS,
        APPOINTMENT_HOOKS,
    )
}

_ALIASES = {
    "owners": "owner",
    "pets": "pet",
    "vets": "vet",
    "veterinarian": "vet",
    "veterinarians": "vet",
    "services": "service",
    "visits": "visit",
    "appointments": "appointment",
}


def get_entity_hooks(name: str) -> EntityHooks:
    """
    Select the hook configuration for an entity.

    Args:
        name: Entity name such as "pet" (plural forms are accepted)

    Raises:
        KeyError: If no configuration exists for the name
    """
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    try:
        return ENTITY_HOOKS[key]
    except KeyError:
        raise KeyError(f"No CRUD hooks registered for entity '{name}'")
