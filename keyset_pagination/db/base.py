"""Document store interface consumed by the pagination executor."""

from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class DocumentStore(Protocol):
    """A store that can run one filtered, sorted, limited, projected read."""
    
    async def find(
        self,
        query: Dict[str, Any],
        sort: List[Tuple[str, int]],
        limit: int,
        projection: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Return at most `limit` documents matching `query` in `sort` order.
        
        Args:
            query: Query document (see keyset_pagination.pagination.query)
            sort: (field, 1 | -1) pairs, most significant first
            limit: Maximum number of documents
            projection: Inclusion or exclusion document, None for everything
        """
        ...
