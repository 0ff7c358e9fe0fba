"""
Response envelopes.

Every answer is a plain dict: ``{"ok": true, "data": ...}`` on success and
``{"ok": false, "error": ..., "statusHint": ...}`` on failure. Pydantic
DTOs inside ``data`` are serialized with camelCase keys.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ..crud.engine import Page

CREATED_MESSAGE = "created"


def serialize(value: Any) -> Any:
    """Convert DTOs (and containers of DTOs) to JSON-compatible values."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, dict):
        return {key: serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(item) for item in value]
    return value


def success(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"ok": True, "data": serialize(data)}
    if message is not None:
        body["message"] = message
    return body


def created(data: Any) -> Dict[str, Any]:
    return success(data, CREATED_MESSAGE)


def list_response(page: Page) -> Dict[str, Any]:
    """Envelope for one page of list results with its paging metadata."""
    items: List[Any] = serialize(page.items)
    return {
        "ok": True,
        "data": items,
        "paging": {
            "total": page.total,
            "page": page.page,
            "pageSize": page.page_size,
            "totalPages": page.total_pages,
        },
    }


def failure(message: str, status_hint: int = 400) -> Dict[str, Any]:
    return {"ok": False, "error": message, "statusHint": status_hint}


def not_found(entity: str = "Record") -> Dict[str, Any]:
    return failure(f"{entity} not found", 404)
