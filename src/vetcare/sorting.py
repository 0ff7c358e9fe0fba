"""
Sort strategies for list results.

List endpoints sort after projection, because fields such as ``full_name``
or ``total_cost`` only exist on the DTOs. A sort key from the query string
is resolved to one of a fixed set of strategies; unknown keys fall back to
sorting by name.

Strategies accept Pydantic models and plain mappings alike and always
return a new list, leaving the input untouched.
"""

import enum
import logging
import unicodedata
from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar

from .utils.datetime_utils import parse_datetime

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")


class SortDirection(enum.Enum):
    """Ordering direction."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Any, default: "SortDirection" = None) -> "SortDirection":
        """
        Parse ``asc``/``desc``/``ascending``/``descending`` (any case).

        Unrecognized values yield ``default`` (ascending when not given).
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip().lower()
            if text in ("asc", "ascending"):
                return cls.ASC
            if text in ("desc", "descending"):
                return cls.DESC
        return default or cls.ASC


def read_field(item: Any, *names: str) -> Any:
    """
    Read the first non-None field among names from a model or mapping.

    Both snake_case and camelCase spellings are tried on mappings, since
    serialized DTOs use camelCase keys.
    """
    for name in names:
        if isinstance(item, dict):
            value = item.get(name)
            if value is None:
                value = item.get(_camel(name))
        else:
            value = getattr(item, name, None)
        if value is not None:
            return value
    return None


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def name_sort_key(value: Any) -> str:
    """
    Build a case-insensitive, accent-aware sort key.

    Letters are compared without their diacritics first (so "Šuo" sorts
    among the S names), with the accented spelling breaking ties.
    """
    text = str(value or "")
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold() + "\x00" + text.casefold()


class SortStrategy(ABC):
    """Base class for list sort strategies."""

    name: str = ""

    def sort(
        self, items: Iterable[ItemT], direction: SortDirection = SortDirection.ASC
    ) -> List[ItemT]:
        """Return a new list sorted in the given direction (stable)."""
        return sorted(
            items, key=self.key, reverse=direction is SortDirection.DESC
        )

    @abstractmethod
    def key(self, item: Any) -> Any:
        """Sort key for one item."""


class SortByName(SortStrategy):
    """Sort on ``name``, falling back to ``full_name``."""

    name = "name"

    def key(self, item: Any) -> str:
        return name_sort_key(read_field(item, "name", "full_name"))


class SortByPrice(SortStrategy):
    """Sort numerically on ``price``, falling back to ``total_cost``; missing is 0."""

    name = "price"

    def key(self, item: Any) -> Decimal:
        value = read_field(item, "price", "total_cost")
        if value is None or isinstance(value, bool):
            return Decimal("0")
        try:
            number = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return Decimal("0")
        return number if number.is_finite() else Decimal("0")


class SortByDate(SortStrategy):
    """
    Sort on ``date``, falling back to ``created_at``.

    Items without a parseable date are placed last in both directions.
    """

    name = "date"

    def key(self, item: Any) -> Optional[datetime]:
        value = read_field(item, "date", "created_at")
        if value is None:
            return None
        if isinstance(value, date) and not isinstance(value, datetime):
            value = value.isoformat()
        try:
            return parse_datetime(value)
        except ValueError:
            return None

    def sort(
        self, items: Iterable[ItemT], direction: SortDirection = SortDirection.ASC
    ) -> List[ItemT]:
        dated = []
        undated = []
        for item in items:
            moment = self.key(item)
            if moment is None:
                undated.append(item)
            else:
                dated.append((moment, item))
        dated.sort(key=lambda pair: pair[0], reverse=direction is SortDirection.DESC)
        return [item for _, item in dated] + undated


_STRATEGIES: Dict[str, Type[SortStrategy]] = {
    "name": SortByName,
    "fullname": SortByName,
    "full_name": SortByName,
    "date": SortByDate,
    "createdat": SortByDate,
    "created_at": SortByDate,
    "price": SortByPrice,
    "totalcost": SortByPrice,
    "total_cost": SortByPrice,
}


def resolve_sort_strategy(key: Optional[str]) -> SortStrategy:
    """
    Map a sort key to its strategy.

    Keys are matched case-insensitively (``createdAt`` and ``created_at``
    are the same key); anything unrecognized sorts by name.
    """
    normalized = (key or "").strip().lower()
    strategy_class = _STRATEGIES.get(normalized)
    if strategy_class is None:
        if normalized:
            logger.debug(f"Unknown sort key {key!r}, sorting by name")
        strategy_class = SortByName
    return strategy_class()


def apply_sort(
    items: Sequence[ItemT],
    key: Optional[str] = None,
    direction: Any = SortDirection.ASC,
) -> List[ItemT]:
    """Resolve ``key`` and sort a copy of ``items`` in ``direction``."""
    return resolve_sort_strategy(key).sort(items, SortDirection.parse(direction))
