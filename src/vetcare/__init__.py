"""
VetCare Core

The service core of a veterinary clinic: records for owners, pets, vets,
services, visits and appointments, with scheduling rules and aggregate
views on top.

It includes:

- SQLAlchemy models for the clinic entities and staff users
- Pydantic schemas for request validation and camelCase DTOs
- A generic CRUD engine configured per entity through hook objects
- DTO projection and post-projection sorting
- The clinic coordinator for visits with services, slot booking,
  availability, daily statistics, owner dashboards and pet history
- Bearer-token access control with PyJWT and bcrypt
- Response envelopes and a request boundary mapping errors by kind

Quick Start:
    >>> from vetcare.database import create_engine, initialize_session_manager
    >>> from vetcare.database import EntityStore
    >>> from vetcare.crud import CrudEngine, get_entity_hooks

    >>> engine = create_engine("sqlite+aiosqlite:///./vetcare.db")
    >>> manager = initialize_session_manager(engine)
    >>> await manager.initialize_database()
    >>> pets = CrudEngine(EntityStore(manager), get_entity_hooks("pet"))
    >>> page = await pets.list({"species": "Šuo"}, sort_key="name")

Requirements:
    - Python 3.11+
    - SQLAlchemy 2.0+
    - Pydantic 2.5+
"""

__version__ = "0.1.0"
__author__ = "Vet Clinic Platform Team"
__email__ = "dev@vetclinic.com"
__license__ = "MIT"

from . import api
from . import auth
from . import crud
from . import database
from . import exceptions
from . import models
from . import schemas
from . import utils

# Convenience imports for common usage patterns
from .crud import CrudEngine, Page, get_entity_hooks
from .database import EntityStore, create_engine, get_session, get_transaction
from .events import ClinicEvent, EventBus, LoggingSink, NullSink
from .exceptions import (
    ErrorKind,
    NotFoundException,
    ValidationException,
    VetCareException,
)
from .scheduling import ClinicCoordinator
from .sorting import SortDirection, resolve_sort_strategy

__all__ = [
    # Version and metadata
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    # Core modules
    "api",
    "auth",
    "crud",
    "database",
    "exceptions",
    "models",
    "schemas",
    "utils",
    # Convenience imports
    "CrudEngine",
    "Page",
    "get_entity_hooks",
    "EntityStore",
    "create_engine",
    "get_session",
    "get_transaction",
    "ClinicCoordinator",
    "ClinicEvent",
    "EventBus",
    "LoggingSink",
    "NullSink",
    "ErrorKind",
    "VetCareException",
    "ValidationException",
    "NotFoundException",
    "SortDirection",
    "resolve_sort_strategy",
]
