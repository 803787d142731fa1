"""In-memory document store evaluating MongoDB-style query documents."""

import copy
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..errors.problem_details import StoreFailureError


logger = logging.getLogger(__name__)

_MISSING = object()


def lookup(document: Dict[str, Any], path: str) -> Any:
    """Read a dot-separated path, returning None when it does not resolve."""
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part, _MISSING)
        if value is _MISSING:
            return None
    return value


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def compare(value: Any, operand: Any) -> bool:
        # Null and mismatched types never satisfy a range comparison
        if value is None or operand is None:
            return False
        try:
            return op(value, operand)
        except TypeError:
            return False
    return compare


def _in(value: Any, operand: Any) -> bool:
    if not isinstance(operand, (list, tuple)):
        raise StoreFailureError(f"$in/$nin expects an array, got {type(operand).__name__}")
    return any(value == candidate for candidate in operand)


OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "$eq": lambda value, operand: value == operand,
    "$ne": lambda value, operand: value != operand,
    "$gt": _compare(lambda value, operand: value > operand),
    "$gte": _compare(lambda value, operand: value >= operand),
    "$lt": _compare(lambda value, operand: value < operand),
    "$lte": _compare(lambda value, operand: value <= operand),
    "$in": _in,
    "$nin": lambda value, operand: not _in(value, operand),
}


def _is_operator_document(condition: Any) -> bool:
    return isinstance(condition, dict) and bool(condition) and all(
        key.startswith("$") for key in condition
    )


def matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    """Evaluate a query document against a document.
    
    Raises:
        StoreFailureError: If the query uses an unsupported operator
    """
    for key, condition in query.items():
        if key in ("$and", "$or"):
            if not isinstance(condition, list):
                raise StoreFailureError(f"{key} expects an array of query documents")
            results = (matches(document, sub_query) for sub_query in condition)
            if not (all(results) if key == "$and" else any(results)):
                return False
        elif key.startswith("$"):
            raise StoreFailureError(f"Unsupported query operator: {key}")
        elif _is_operator_document(condition):
            value = lookup(document, key)
            for op, operand in condition.items():
                evaluate = OPERATORS.get(op)
                if evaluate is None:
                    raise StoreFailureError(f"Unsupported query operator: {op}")
                if not evaluate(value, operand):
                    return False
        elif lookup(document, key) != condition:
            return False
    return True


def sort_documents(
    documents: List[Dict[str, Any]],
    sort: List[Tuple[str, int]]
) -> List[Dict[str, Any]]:
    """Sort documents by (field, 1 | -1) pairs, nulls ordered first."""
    result = list(documents)
    # Stable sorts applied from the least significant key upwards
    for field, sign in reversed(sort):
        try:
            result.sort(
                key=lambda doc: (lookup(doc, field) is not None, lookup(doc, field)),
                reverse=sign < 0
            )
        except TypeError as e:
            raise StoreFailureError(f"Values of '{field}' are not comparable: {e}")
    return result


def _set_path(target: Dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    for part in parts[:-1]:
        target = target.setdefault(part, {})
    target[parts[-1]] = value


def _delete_path(target: Dict[str, Any], path: str) -> None:
    parts = path.split(".")
    for part in parts[:-1]:
        target = target.get(part)
        if not isinstance(target, dict):
            return
    target.pop(parts[-1], None)


def _has_path(document: Dict[str, Any], path: str) -> bool:
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return False
        value = value[part]
    return True


def project(document: Dict[str, Any], projection: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Apply an inclusion or exclusion projection.
    
    `_id` is kept unless explicitly excluded.
    """
    if not projection:
        return copy.deepcopy(document)
    
    fields = {path: bool(flag) for path, flag in projection.items() if path != "_id"}
    keep_id = bool(projection.get("_id", True))
    
    if len(set(fields.values())) > 1:
        raise StoreFailureError("Projection cannot mix inclusion and exclusion")
    
    if fields and all(fields.values()):
        result: Dict[str, Any] = {}
        if keep_id and "_id" in document:
            result["_id"] = copy.deepcopy(document["_id"])
        for path in fields:
            if _has_path(document, path):
                _set_path(result, path, copy.deepcopy(lookup(document, path)))
        return result
    
    result = copy.deepcopy(document)
    for path in fields:
        _delete_path(result, path)
    if not keep_id:
        result.pop("_id", None)
    return result


class InMemoryDocumentStore:
    """Document store over a list of dicts.
    
    Supports implicit equality, $eq, $ne, $gt, $gte, $lt, $lte, $in, $nin,
    $and and $or, dot paths into nested documents, multi-key sorts and
    inclusion/exclusion projections.
    """
    
    def __init__(self, documents: Optional[Iterable[Dict[str, Any]]] = None):
        self._documents: List[Dict[str, Any]] = [copy.deepcopy(doc) for doc in documents or []]
    
    def __len__(self) -> int:
        return len(self._documents)
    
    def insert(self, document: Dict[str, Any]) -> None:
        """Add a document to the store."""
        self._documents.append(copy.deepcopy(document))
    
    def delete(self, query: Dict[str, Any]) -> int:
        """Remove documents matching a query, returning how many were removed."""
        kept = [doc for doc in self._documents if not matches(doc, query)]
        removed = len(self._documents) - len(kept)
        self._documents = kept
        return removed
    
    async def find(
        self,
        query: Dict[str, Any],
        sort: List[Tuple[str, int]],
        limit: int,
        projection: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Return at most `limit` matching documents in sort order."""
        matched = [doc for doc in self._documents if matches(doc, query)]
        ordered = sort_documents(matched, sort)[:limit]
        logger.debug(f"In-memory find matched {len(matched)} documents, returning {len(ordered)}")
        return [project(doc, projection) for doc in ordered]
