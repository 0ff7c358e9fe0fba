"""
Request boundary.

Turns the outcome of an operation into a response envelope: results are
wrapped, clinic exceptions are mapped by their ``ErrorKind`` and anything
unexpected is logged and answered with a generic message.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from ..auth.gate import AccessGate, Principal
from ..crud.engine import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, Page, normalize_paging
from ..exceptions import VetCareException
from ..sorting import SortDirection
from .responses import created as created_envelope
from .responses import failure, list_response, not_found, success

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

Operation = Union[Callable[[], Awaitable[Any]], Callable[[Principal], Awaitable[Any]]]


def _to_int(value: Any, default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def parse_list_query(
    params: Optional[Mapping[str, Any]] = None,
    default_sort: str = "name",
    default_order: str = "asc",
) -> Dict[str, Any]:
    """
    Parse paging and sorting query parameters.

    Args:
        params: Query-string values (``page``, ``limit``/``pageSize``,
            ``sortBy``, ``order``)
        default_sort: Sort key when ``sortBy`` is absent
        default_order: Direction when ``order`` is absent or unrecognized

    Returns:
        Dict with ``page``, ``page_size``, ``sort_key`` and ``direction``;
        the remaining parameters are returned under ``filters``
    """
    params = dict(params or {})
    raw_size = params.pop("limit", None)
    if raw_size is None:
        raw_size = params.pop("pageSize", params.pop("page_size", None))
    else:
        params.pop("pageSize", None)
        params.pop("page_size", None)

    page, page_size = normalize_paging(
        _to_int(params.pop("page", None), DEFAULT_PAGE),
        _to_int(raw_size, DEFAULT_PAGE_SIZE),
    )
    sort_key = params.pop("sortBy", None) or params.pop("sort_by", None) or default_sort
    direction = SortDirection.parse(
        params.pop("order", None), SortDirection.parse(default_order)
    )
    return {
        "page": page,
        "page_size": page_size,
        "sort_key": sort_key,
        "direction": direction,
        "filters": params,
    }


class RequestBoundary:
    """Runs operations and renders their outcome as envelopes."""

    def __init__(self, gate: Optional[AccessGate] = None):
        self.gate = gate

    def _render(
        self,
        result: Any,
        created: bool,
        message: Optional[str],
        entity: str,
    ) -> Dict[str, Any]:
        if result is None:
            return not_found(entity)
        if isinstance(result, Page):
            return list_response(result)
        if created:
            return created_envelope(result)
        return success(result, message)

    async def respond(
        self,
        operation: Operation,
        authorization: Optional[str] = None,
        protected: bool = False,
        created: bool = False,
        message: Optional[str] = None,
        entity: str = "Record",
    ) -> Dict[str, Any]:
        """
        Run an operation and build its response envelope.

        Args:
            operation: Zero-argument coroutine function, or one taking the
                authenticated ``Principal`` when ``protected``
            authorization: ``Authorization`` header of the request
            protected: Authenticate before running the operation
            created: Answer with the "created" envelope
            message: Optional message for the success envelope
            entity: Entity named in the 404 envelope when the result is None

        Returns:
            Success, list or failure envelope
        """
        try:
            if protected:
                if self.gate is None:
                    raise RuntimeError("Protected operation without an access gate")
                principal = self.gate.authenticate(authorization)
                result = await operation(principal)
            else:
                result = await operation()
            return self._render(result, created, message, entity)
        except VetCareException as e:
            if e.is_internal:
                e.log_error(logger)
                return failure(INTERNAL_ERROR_MESSAGE, e.status_hint)
            logger.debug(f"{e.kind.value}: {e.message}")
            return failure(e.message, e.status_hint)
        except Exception:
            logger.exception("Unhandled error while serving request")
            return failure(INTERNAL_ERROR_MESSAGE, 500)
