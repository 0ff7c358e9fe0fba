"""
Generic CRUD orchestration for clinic entities.

The engine runs one pipeline for every entity; entity-specific behaviour
comes from the hook configurations registered in ``hooks``.
"""

from .engine import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    CrudEngine,
    EntityHooks,
    Page,
    normalize_paging,
    parse_record_id,
)
from .hooks import (
    APPOINTMENT_HOOKS,
    ENTITY_HOOKS,
    OWNER_HOOKS,
    PET_HOOKS,
    SERVICE_HOOKS,
    VET_HOOKS,
    VISIT_HOOKS,
    get_entity_hooks,
    schema_validator,
    validate_with_schema,
)

__all__ = [
    # Engine
    "CrudEngine",
    "EntityHooks",
    "Page",
    "normalize_paging",
    "parse_record_id",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Hook configurations
    "OWNER_HOOKS",
    "PET_HOOKS",
    "VET_HOOKS",
    "SERVICE_HOOKS",
    "VISIT_HOOKS",
    "APPOINTMENT_HOOKS",
    "ENTITY_HOOKS",
    "get_entity_hooks",
    "schema_validator",
    "validate_with_schema",
]
