"""
Entity store for the vetcare package.

``EntityStore`` is the persistence seam used by the CRUD engine and the
scheduling coordinator. It works on any mapped model class and takes
filters as SQLAlchemy boolean clauses and relations as loader options
(e.g. ``selectinload(Pet.owner)``), so callers never touch sessions.

A store is either unbound, opening a fresh session per call, or bound to
the session of an open transaction (see ``EntityStore.transaction``), in
which case every write joins that transaction.
"""

import logging
from contextlib import asynccontextmanager
from typing import (
    Any,
    AsyncGenerator,
    Dict,
    List,
    Optional,
    Sequence,
    Type,
    TypeVar,
)

from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.interfaces import ORMOption

from ..exceptions import (
    DatabaseException,
    DuplicateRecordException,
    NotFoundException,
    ReferenceConflictException,
    TransactionException,
    VetCareException,
)
from .session import SessionManager

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

Filters = Optional[Sequence[ColumnElement[bool]]]
Relations = Optional[Sequence[ORMOption]]

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def entity_label(model: Type[Any]) -> str:
    """Human-readable name of a model used in error messages."""
    return getattr(model, "entity_label", model.__name__)


def _sqlstate(error: IntegrityError) -> Optional[str]:
    orig = error.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def _duplicate_field(message: str) -> Optional[str]:
    if "email" in message:
        return "email"
    if "time_slot" in message or "vet_day_slot" in message:
        return "time_slot"
    return None


def translate_integrity_error(
    error: IntegrityError,
    model: Type[Any],
    operation: str,
    record_id: Optional[Any] = None,
) -> VetCareException:
    """
    Map a constraint violation to the clinic exception it represents.

    SQLSTATE codes are checked first (PostgreSQL); SQLite only reports
    constraint failures in the message text.

    Args:
        error: The IntegrityError raised by the driver
        model: Model class the statement targeted
        operation: "create", "update" or "delete"
        record_id: Identifier of the row being updated or deleted

    Returns:
        DuplicateRecordException, ReferenceConflictException,
        NotFoundException or DatabaseException
    """
    code = _sqlstate(error)
    message = str(error.orig).lower()
    label = entity_label(model)

    if code == UNIQUE_VIOLATION or "unique constraint" in message or "duplicate key" in message:
        field = _duplicate_field(message)
        if field == "time_slot":
            text = "This time slot is already booked for the selected vet"
        elif field:
            text = f"{label} with this {field} already exists"
        else:
            text = f"{label} already exists"
        return DuplicateRecordException(text, entity=label, field=field)

    if code == FOREIGN_KEY_VIOLATION or "foreign key" in message:
        if operation == "delete":
            return ReferenceConflictException(entity=label, record_id=record_id)
        return NotFoundException(
            entity="Referenced record",
            message=f"{label} references a record that does not exist",
        )

    return DatabaseException(
        f"Failed to {operation} {label}",
        details={"entity": label},
        original_error=error,
    )


class EntityStore:
    """Per-model persistence operations with atomic transaction support."""

    def __init__(
        self, session_manager: SessionManager, session: Optional[AsyncSession] = None
    ):
        """
        Initialize the store.

        Args:
            session_manager: Source of sessions and transactions
            session: Session of an open transaction to bind writes to
        """
        self.session_manager = session_manager
        self._session = session

    @property
    def in_transaction(self) -> bool:
        return self._session is not None

    @asynccontextmanager
    async def _reader(self) -> AsyncGenerator[AsyncSession, None]:
        if self._session is not None:
            yield self._session
        else:
            async with self.session_manager.get_session() as session:
                yield session

    @asynccontextmanager
    async def _writer(self) -> AsyncGenerator[AsyncSession, None]:
        if self._session is not None:
            yield self._session
        else:
            async with self.session_manager.get_transaction() as session:
                yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator["EntityStore", None]:
        """
        Run several writes as one unit.

        Yields a store bound to a single transaction. The transaction
        commits when the block exits normally and rolls back entirely when
        it raises. Nested use joins the outer transaction.

        Example:
            async with store.transaction() as tx:
                visit = await tx.create(Visit, {...})
                await tx.create(VisitService, {"visit_id": visit.id, ...})
        """
        if self._session is not None:
            yield self
            return

        try:
            async with self.session_manager.get_transaction() as session:
                yield EntityStore(self.session_manager, session=session)
        except VetCareException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Transaction failed: {e}")
            raise TransactionException(original_error=e)

    def _select(
        self,
        model: Type[ModelT],
        filters: Filters = None,
        relations: Relations = None,
        order_by: Optional[Sequence[Any]] = None,
    ):
        stmt = select(model)
        if filters:
            stmt = stmt.where(*filters)
        if relations:
            stmt = stmt.options(*relations)
        stmt = stmt.order_by(*(order_by or [model.id]))
        return stmt

    async def count(self, model: Type[Any], filters: Filters = None) -> int:
        """Count rows of model matching all filters."""
        stmt = select(func.count()).select_from(model)
        if filters:
            stmt = stmt.where(*filters)
        try:
            async with self._reader() as session:
                result = await session.execute(stmt)
                return int(result.scalar_one())
        except SQLAlchemyError as e:
            raise DatabaseException(
                f"Failed to count {entity_label(model)}", original_error=e
            )

    async def find_many(
        self,
        model: Type[ModelT],
        filters: Filters = None,
        relations: Relations = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        order_by: Optional[Sequence[Any]] = None,
    ) -> List[ModelT]:
        """
        Fetch rows matching all filters with relations eagerly loaded.

        Args:
            model: Model class to query
            filters: Boolean clauses combined with AND
            relations: Loader options for relations to include
            offset: Number of rows to skip
            limit: Maximum number of rows to return
            order_by: Ordering clauses (primary key when omitted)

        Returns:
            List of model instances
        """
        stmt = self._select(model, filters, relations, order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            async with self._reader() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise DatabaseException(
                f"Failed to fetch {entity_label(model)} records", original_error=e
            )

    async def find_one(
        self, model: Type[ModelT], record_id: Any, relations: Relations = None
    ) -> Optional[ModelT]:
        """Fetch a single row by primary key, or None when it does not exist."""
        return await self.find_first(model, [model.id == record_id], relations)

    async def find_first(
        self,
        model: Type[ModelT],
        filters: Filters = None,
        relations: Relations = None,
        order_by: Optional[Sequence[Any]] = None,
    ) -> Optional[ModelT]:
        """Fetch the first row matching all filters, or None."""
        stmt = self._select(model, filters, relations, order_by).limit(1)
        try:
            async with self._reader() as session:
                result = await session.execute(stmt)
                return result.scalars().first()
        except SQLAlchemyError as e:
            raise DatabaseException(
                f"Failed to fetch {entity_label(model)}", original_error=e
            )

    async def _reload(
        self, session: AsyncSession, model: Type[ModelT], record_id: Any, relations: Relations
    ) -> ModelT:
        stmt = (
            select(model)
            .where(model.id == record_id)
            .execution_options(populate_existing=True)
        )
        if relations:
            stmt = stmt.options(*relations)
        result = await session.execute(stmt)
        return result.scalars().one()

    async def create(
        self,
        model: Type[ModelT],
        data: Dict[str, Any],
        relations: Relations = None,
    ) -> ModelT:
        """
        Insert a row and return it with relations loaded.

        Raises:
            DuplicateRecordException: If a unique field is already taken
            NotFoundException: If a referenced record does not exist
            DatabaseException: On any other database failure
        """
        try:
            async with self._writer() as session:
                record = model(**data)
                session.add(record)
                await session.flush()
                record = await self._reload(session, model, record.id, relations)
            logger.debug(f"Created {entity_label(model)} {record.id}")
            return record
        except IntegrityError as e:
            raise translate_integrity_error(e, model, "create")
        except SQLAlchemyError as e:
            raise DatabaseException(
                f"Failed to create {entity_label(model)}", original_error=e
            )

    async def update(
        self,
        model: Type[ModelT],
        record_id: Any,
        data: Dict[str, Any],
        relations: Relations = None,
    ) -> ModelT:
        """
        Replace the given fields of an existing row.

        Only keys present in ``data`` are touched.

        Raises:
            NotFoundException: If no row has this id, or a referenced id is unknown
            DuplicateRecordException: If a unique field is already taken
            DatabaseException: On any other database failure
        """
        try:
            async with self._writer() as session:
                record = await session.get(model, record_id)
                if record is None:
                    raise NotFoundException(entity_label(model), record_id)
                record.update_fields(**data)
                await session.flush()
                record = await self._reload(session, model, record_id, relations)
            logger.debug(f"Updated {entity_label(model)} {record_id}")
            return record
        except IntegrityError as e:
            raise translate_integrity_error(e, model, "update", record_id)
        except SQLAlchemyError as e:
            raise DatabaseException(
                f"Failed to update {entity_label(model)}", original_error=e
            )

    async def delete(self, model: Type[Any], record_id: Any) -> None:
        """
        Delete a row by primary key.

        Raises:
            NotFoundException: If no row has this id
            ReferenceConflictException: If other rows still reference it
            DatabaseException: On any other database failure
        """
        try:
            async with self._writer() as session:
                result = await session.execute(
                    delete(model).where(model.id == record_id)
                )
                if result.rowcount == 0:
                    raise NotFoundException(entity_label(model), record_id)
            logger.debug(f"Deleted {entity_label(model)} {record_id}")
        except IntegrityError as e:
            raise translate_integrity_error(e, model, "delete", record_id)
        except SQLAlchemyError as e:
            raise DatabaseException(
                f"Failed to delete {entity_label(model)}", original_error=e
            )
