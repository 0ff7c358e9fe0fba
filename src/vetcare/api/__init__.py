"""
Response envelopes and the request boundary.
"""

from .boundary import INTERNAL_ERROR_MESSAGE, RequestBoundary, parse_list_query
from .responses import (
    created,
    failure,
    list_response,
    not_found,
    serialize,
    success,
)

__all__ = [
    "RequestBoundary",
    "parse_list_query",
    "INTERNAL_ERROR_MESSAGE",
    "success",
    "created",
    "list_response",
    "failure",
    "not_found",
    "serialize",
]
