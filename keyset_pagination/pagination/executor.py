"""Relay-style keyset pagination over a document store."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from ..config import Settings
from ..db.base import DocumentStore
from ..errors.problem_details import InvalidParametersError
from ..models import Connection, Edge, PageInfo, PaginationParams, Position, SortKey
from .cursor import encode_cursor
from .normalizer import normalize_params
from .query import build_sort, extend_query


logger = logging.getLogger(__name__)

_MISSING = object()


def read_path(document: Any, path: str) -> Any:
    """Read a dot-separated field path from a document.
    
    Raises:
        InvalidParametersError: If the path does not resolve
    """
    value = document
    for part in path.split("."):
        if isinstance(value, Mapping):
            value = value.get(part, _MISSING)
        else:
            value = getattr(value, part, _MISSING)
        if value is _MISSING:
            raise InvalidParametersError(f"Sort field '{path}' is missing from a returned document")
    return value


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic validation error into a one-line detail."""
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        problems.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "; ".join(problems)


def build_position(document: Any, sort: List[SortKey]) -> Position:
    """Compute a document's position in the given sort."""
    return Position(entries=[(key.field, read_path(document, key.field)) for key in sort])


async def find_paginated(
    store: DocumentStore,
    params: Optional[PaginationParams] = None,
    settings: Optional[Settings] = None,
    **kwargs: Any
) -> Connection:
    """Fetch one page of documents as a Relay connection.
    
    Args:
        store: Document store to query
        params: Pagination request; keyword arguments build one when omitted
        settings: Settings providing the default limit and tie-breaker key
        **kwargs: PaginationParams fields, used when params is None. Fields
            that fail validation raise InvalidParametersError; callers that
            build PaginationParams themselves can translate their own
            ValidationError with describe_validation_error.
        
    Returns:
        Connection with edges in the declared sort order and page info
        
    Raises:
        InvalidParametersError: If the arguments cannot form a plan
        InvalidCursorError: If the boundary cursor is malformed
        Exception: Whatever the store raises, unchanged
    """
    if params is None:
        try:
            params = PaginationParams(**kwargs)
        except ValidationError as e:
            raise InvalidParametersError(describe_validation_error(e)) from e
    elif kwargs:
        raise InvalidParametersError("Pass either params or keyword arguments, not both")
    
    plan = normalize_params(params, settings)
    query = extend_query(params.query, plan.cursor, plan.execution_sort)
    
    try:
        # One extra document tells whether more exist past this page
        documents = await store.find(
            query,
            build_sort(plan.execution_sort),
            plan.limit + 1,
            params.projection
        )
    except Exception as e:
        logger.error(f"Document store query failed: {type(e).__name__} - {e}")
        raise
    
    has_more = len(documents) > plan.limit
    page: List[Dict[str, Any]] = list(documents[:plan.limit])
    
    # Fetched in inverted order, presented in the declared order
    if plan.paginating_backwards:
        page.reverse()
    
    edges = [
        Edge(cursor=encode_cursor(build_position(document, plan.sort)), node=document)
        for document in page
    ]
    
    if plan.paginating_backwards:
        has_previous_page = has_more
        has_next_page = params.before is not None
    else:
        has_previous_page = params.after is not None
        has_next_page = has_more
    
    logger.debug(f"Fetched page of {len(edges)} documents, has_more={has_more}")
    
    return Connection(
        edges=edges,
        page_info=PageInfo(
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
            has_previous_page=has_previous_page,
            has_next_page=has_next_page
        )
    )
