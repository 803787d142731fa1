"""Pagination module for cursor-based keyset pagination."""

from .cursor import encode_cursor, decode_cursor
from .normalizer import normalize_params, resolve_sort, invert_sort, sanitize_limit
from .query import build_keyset_filter, extend_query, build_sort
from .executor import find_paginated, build_position, read_path, describe_validation_error

__all__ = [
    "encode_cursor",
    "decode_cursor",
    "normalize_params",
    "resolve_sort",
    "invert_sort",
    "sanitize_limit",
    "build_keyset_filter",
    "extend_query",
    "build_sort",
    "find_paginated",
    "build_position",
    "read_path",
    "describe_validation_error"
]
