"""Relay-style keyset pagination over document stores."""

from .config import Settings, get_settings
from .models import (
    Direction,
    SortKey,
    Position,
    PaginationParams,
    PaginationPlan,
    Edge,
    PageInfo,
    Connection
)
from .errors import (
    PaginationError,
    InvalidCursorError,
    InvalidParametersError,
    StoreFailureError,
    register_exception_handlers
)
from .pagination import find_paginated, encode_cursor, decode_cursor
from .db import DocumentStore, InMemoryDocumentStore, PostgresDocumentStore

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "get_settings",
    "Direction",
    "SortKey",
    "Position",
    "PaginationParams",
    "PaginationPlan",
    "Edge",
    "PageInfo",
    "Connection",
    "PaginationError",
    "InvalidCursorError",
    "InvalidParametersError",
    "StoreFailureError",
    "register_exception_handlers",
    "find_paginated",
    "encode_cursor",
    "decode_cursor",
    "DocumentStore",
    "InMemoryDocumentStore",
    "PostgresDocumentStore"
]
