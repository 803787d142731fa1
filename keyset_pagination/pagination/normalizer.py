"""Resolve Relay-style pagination arguments into a canonical plan.

first/after drive forward pagination and last/before drive backward
pagination. Getting the last N documents in the declared order is the same
as getting the first N documents in the inverted order, so backward requests
are planned as forward requests over the inverted sort.
"""

import logging
from typing import List, Optional

from ..config import Settings, get_settings
from ..errors.problem_details import InvalidCursorError, InvalidParametersError
from ..models import Direction, PaginationParams, PaginationPlan, Position, SortKey
from .cursor import decode_cursor


logger = logging.getLogger(__name__)


def sanitize_limit(requested: Optional[int], default_limit: int) -> int:
    """Resolve a requested page size.
    
    Missing, zero and negative counts fall back to the default.
    """
    if requested is None or requested <= 0:
        requested = default_limit
    return max(1, requested)


def resolve_sort(params: PaginationParams, unique_key: str) -> List[SortKey]:
    """Build the declared sort, appending the tie-breaker when absent.
    
    Raises:
        InvalidParametersError: If sort and paginated_field are both given,
            the sort is empty, or a field path repeats
    """
    if params.sort is not None and params.paginated_field is not None:
        raise InvalidParametersError("Use either sort or paginated_field, not both")
    
    if params.sort is not None:
        sort = list(params.sort)
        if not sort:
            raise InvalidParametersError("Sort must contain at least one key")
    elif params.paginated_field is not None:
        sort = [SortKey(field=params.paginated_field, direction=params.direction)]
    else:
        sort = [SortKey(field=unique_key, direction=Direction.ASC)]
    
    fields = [key.field for key in sort]
    duplicates = sorted({name for name in fields if fields.count(name) > 1})
    if duplicates:
        raise InvalidParametersError(f"Duplicate sort fields: {', '.join(duplicates)}")
    
    if unique_key not in fields:
        sort.append(SortKey(field=unique_key, direction=Direction.ASC))
    
    return sort


def invert_sort(sort: List[SortKey]) -> List[SortKey]:
    """Invert the direction of every sort key."""
    return [key.inverted() for key in sort]


def check_cursor_fields(position: Position, sort: List[SortKey]) -> None:
    """Ensure a decoded position lines up with the active sort.
    
    Raises:
        InvalidCursorError: If field count or order differ
    """
    expected = [key.field for key in sort]
    if position.fields != expected:
        raise InvalidCursorError(
            f"Cursor fields {position.fields} do not match sort fields {expected}"
        )


def normalize_params(
    params: PaginationParams,
    settings: Optional[Settings] = None
) -> PaginationPlan:
    """Normalize pagination arguments into an execution plan.
    
    Args:
        params: Pagination request
        settings: Settings providing the default limit and tie-breaker key
        
    Returns:
        Plan with limit, decoded cursor, execution sort and direction flag
        
    Raises:
        InvalidParametersError: If first and last are both given or the sort
            is invalid
        InvalidCursorError: If the boundary cursor is malformed or belongs
            to a different sort
    """
    settings = settings or get_settings()
    
    if params.first is not None and params.last is not None:
        raise InvalidParametersError("Use either first or last, not both")
    
    sort = resolve_sort(params, settings.unique_key)
    
    if params.paginating_backwards:
        limit = sanitize_limit(params.last, settings.default_page_size)
        token = params.before
        execution_sort = invert_sort(sort)
    else:
        limit = sanitize_limit(params.first, settings.default_page_size)
        token = params.after
        execution_sort = list(sort)
    
    cursor = None
    if token is not None:
        cursor = decode_cursor(token)
        check_cursor_fields(cursor, sort)
    
    plan = PaginationPlan(
        limit=limit,
        cursor=cursor,
        sort=sort,
        execution_sort=execution_sort,
        paginating_backwards=params.paginating_backwards
    )
    logger.debug(
        f"Pagination plan: limit={plan.limit} backwards={plan.paginating_backwards} "
        f"cursor={'yes' if cursor else 'no'} sort={[(k.field, k.direction.value) for k in execution_sort]}"
    )
    return plan
