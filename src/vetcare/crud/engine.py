"""
Generic CRUD orchestration.

``CrudEngine`` runs the same pipeline for every entity and defers the
entity-specific steps to an ``EntityHooks`` configuration:

    list    build_filter -> count + fetch (concurrently) -> project_many -> sort
    get     fetch with relations -> project_one
    create  validate -> normalize_input -> store create -> after_create -> project_one
    update  validate (partial) -> normalize_input -> store update -> after_update -> project_one
    delete  before_delete -> store delete

Side-effect hooks (``after_create``/``after_update``) never abort the
write; their failures are logged.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
)

from ..database.store import EntityStore
from ..events import NotificationSink, NullSink
from ..exceptions import ValidationException, log_exception_context
from ..sorting import SortDirection, resolve_sort_strategy
from ..utils.validation import validate_record_id

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def normalize_paging(
    page: Optional[int] = None, page_size: Optional[int] = None
) -> Tuple[int, int]:
    """
    Clamp paging parameters.

    ``page`` is floored to 1; ``page_size`` is clamped to [1, 100] and
    defaults to 10.
    """
    page = DEFAULT_PAGE if page is None else max(int(page), 1)
    if page_size is None:
        page_size = DEFAULT_PAGE_SIZE
    page_size = min(max(int(page_size), 1), MAX_PAGE_SIZE)
    return page, page_size


@dataclass
class Page(Generic[T]):
    """One page of projected, sorted list results."""

    items: List[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": self.items,
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
        }


def _accept(data: Mapping[str, Any], partial: bool) -> Dict[str, Any]:
    return dict(data)


def _identity(data: Dict[str, Any]) -> Dict[str, Any]:
    return data


def _no_side_effect(record: Any, sink: NotificationSink) -> None:
    return None


async def _no_guard(store: EntityStore, record_id: int) -> None:
    return None


def _no_relations() -> Sequence[Any]:
    return ()


@dataclass
class EntityHooks:
    """
    Entity-specific steps plugged into the CRUD pipeline.

    ``build_filter``, ``project_one`` and ``project_many`` are required;
    every other hook has a no-op default.
    """

    name: str
    label: str
    model: Type[Any]
    build_filter: Callable[[Mapping[str, Any]], List[Any]]
    project_one: Callable[[Any], Any]
    project_many: Callable[[Sequence[Any]], List[Any]]
    relations: Callable[[], Sequence[Any]] = _no_relations
    validate: Callable[[Mapping[str, Any], bool], Dict[str, Any]] = _accept
    normalize_input: Callable[[Dict[str, Any]], Dict[str, Any]] = _identity
    after_create: Callable[[Any, NotificationSink], None] = _no_side_effect
    after_update: Callable[[Any, NotificationSink], None] = _no_side_effect
    before_delete: Callable[[EntityStore, int], Awaitable[None]] = _no_guard
    order_by: Optional[Callable[[], Sequence[Any]]] = None
    default_sort: str = "name"
    default_direction: SortDirection = SortDirection.ASC


def parse_record_id(record_id: Any) -> int:
    """
    Coerce a path identifier to a positive integer.

    Raises:
        ValidationException: If the identifier is not a positive integer
    """
    try:
        return validate_record_id(record_id, "id")
    except ValueError as e:
        raise ValidationException(str(e), field="id", value=record_id)


class CrudEngine(Generic[T]):
    """Runs list/get/create/update/delete for one entity type."""

    def __init__(
        self,
        store: EntityStore,
        hooks: EntityHooks,
        sink: Optional[NotificationSink] = None,
    ):
        """
        Initialize the engine.

        Args:
            store: Persistence for the entity
            hooks: Entity-specific pipeline steps
            sink: Receiver of notification events (discarded when omitted)
        """
        self.store = store
        self.hooks = hooks
        self.sink = sink or NullSink()

    @property
    def model(self) -> Type[Any]:
        return self.hooks.model

    def _order_by(self) -> Optional[Sequence[Any]]:
        return self.hooks.order_by() if self.hooks.order_by else None

    async def list(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        sort_key: Optional[str] = None,
        direction: Any = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> Page[T]:
        """
        List one page of records, projected and sorted.

        The count and the bounded fetch run concurrently on separate
        sessions; the page is sorted after projection so derived DTO
        fields can be sort keys.

        Args:
            filters: Raw filter parameters (e.g. parsed query string)
            sort_key: Sort key, resolved with ``resolve_sort_strategy``
            direction: ``asc``/``desc`` or a SortDirection
            page: 1-based page number
            page_size: Items per page (clamped to [1, 100])

        Returns:
            Page of DTOs with paging metadata
        """
        page, page_size = normalize_paging(page, page_size)
        clauses = self.hooks.build_filter(filters or {})
        offset = (page - 1) * page_size

        count_call = self.store.count(self.model, clauses)
        fetch_call = self.store.find_many(
            self.model,
            clauses,
            relations=self.hooks.relations(),
            offset=offset,
            limit=page_size,
            order_by=self._order_by(),
        )
        if self.store.in_transaction:
            # A single session cannot serve concurrent statements
            total = await count_call
            records = await fetch_call
        else:
            total, records = await asyncio.gather(count_call, fetch_call)

        items = self.hooks.project_many(records)
        strategy = resolve_sort_strategy(sort_key or self.hooks.default_sort)
        items = strategy.sort(
            items, SortDirection.parse(direction, self.hooks.default_direction)
        )
        return Page(items=items, total=total, page=page, page_size=page_size)

    async def get_by_id(self, record_id: Any) -> Optional[T]:
        """Fetch one record with relations; None when it does not exist."""
        record = await self.store.find_one(
            self.model, parse_record_id(record_id), self.hooks.relations()
        )
        if record is None:
            return None
        return self.hooks.project_one(record)

    def _prepare(self, data: Mapping[str, Any], partial: bool) -> Dict[str, Any]:
        cleaned = self.hooks.validate(data, partial)
        return self.hooks.normalize_input(cleaned)

    def _run_side_effect(
        self, hook: Callable[[Any, NotificationSink], None], record: Any, stage: str
    ) -> None:
        try:
            hook(record, self.sink)
        except Exception as e:
            log_exception_context(
                e,
                {"entity": self.hooks.name, "stage": stage, "id": record.id},
                logger=logger,
            )

    async def create(self, data: Mapping[str, Any]) -> T:
        """
        Validate and insert a record.

        Raises:
            ValidationException: If required fields are missing or malformed
            ConflictException: If a unique field is already taken
            NotFoundException: If a referenced record does not exist
        """
        values = self._prepare(data, partial=False)
        record = await self.store.create(self.model, values, self.hooks.relations())
        logger.info(f"Created {self.hooks.label} {record.id}")
        self._run_side_effect(self.hooks.after_create, record, "after_create")
        return self.hooks.project_one(record)

    async def update(self, record_id: Any, data: Mapping[str, Any]) -> T:
        """
        Apply a partial update; only fields present in data are touched.

        Raises:
            ValidationException: If a supplied field is malformed
            NotFoundException: If the record does not exist
        """
        record_id = parse_record_id(record_id)
        values = self._prepare(data, partial=True)
        record = await self.store.update(
            self.model, record_id, values, self.hooks.relations()
        )
        logger.info(f"Updated {self.hooks.label} {record_id}")
        self._run_side_effect(self.hooks.after_update, record, "after_update")
        return self.hooks.project_one(record)

    async def delete(self, record_id: Any) -> Dict[str, int]:
        """
        Delete a record after its guard passes.

        Raises:
            ConflictException: If a guard refuses or other records reference it
            NotFoundException: If the record does not exist
        """
        record_id = parse_record_id(record_id)
        await self.hooks.before_delete(self.store, record_id)
        await self.store.delete(self.model, record_id)
        logger.info(f"Deleted {self.hooks.label} {record_id}")
        return {"id": record_id}
