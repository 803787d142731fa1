"""Keyset predicate construction.

For ORDER BY (a ASC, b DESC, _id ASC) and a cursor at (v1, v2, v3), the
documents strictly after the cursor are:

    (a > v1)
    OR (a = v1 AND b < v2)
    OR (a = v1 AND b = v2 AND _id > v3)

Disjunct i pins every more significant key to the cursor value and moves
key i strictly past it. The last disjunct only constrains the unique key, so
documents tied on every other key still have a strict order.

Range operators never match null, so a position holding a null value cannot
bound a page and is rejected instead of silently skipping documents.
"""

from typing import Any, Dict, List, Optional, Tuple

from ..errors.problem_details import InvalidParametersError
from ..models import Direction, Position, SortKey


def comparison_operator(direction: Direction) -> str:
    """Operator that moves past a value in the given direction."""
    return "$gt" if direction is Direction.ASC else "$lt"


def build_keyset_filter(position: Position, sort: List[SortKey]) -> Dict[str, Any]:
    """Build the predicate selecting documents strictly after a position.
    
    Args:
        position: Decoded cursor position, aligned by index with sort
        sort: Sort order the store will apply
        
    Returns:
        Query document matching documents past the position
        
    Raises:
        InvalidParametersError: If a position value is null
    """
    values = position.values
    for key, value in zip(sort, values):
        if value is None:
            raise InvalidParametersError(
                f"Sort field '{key.field}' is null at the cursor position; "
                "null sort values cannot bound a page"
            )
    
    if len(sort) == 1:
        key = sort[0]
        return {key.field: {comparison_operator(key.direction): values[0]}}
    
    disjuncts = []
    for i, key in enumerate(sort):
        clause: Dict[str, Any] = {}
        for j in range(i):
            clause[sort[j].field] = {"$eq": values[j]}
        clause[key.field] = {comparison_operator(key.direction): values[i]}
        disjuncts.append(clause)
    
    return {"$or": disjuncts}


def extend_query(
    query: Dict[str, Any],
    cursor: Optional[Position],
    sort: List[SortKey]
) -> Dict[str, Any]:
    """Restrict a base query to documents after the cursor.
    
    The base query is returned unmodified when there is no cursor.
    """
    if cursor is None:
        return query
    return {"$and": [query, build_keyset_filter(cursor, sort)]}


def build_sort(sort: List[SortKey]) -> List[Tuple[str, int]]:
    """Store-native sort specification: (field, 1 | -1) pairs."""
    return [(key.field, key.direction.sign) for key in sort]
