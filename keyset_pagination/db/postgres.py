"""PostgreSQL document store backed by asyncpg.

Query documents are translated into a parameterised SELECT. Field paths map
to columns, so only top-level fields are addressable:

    {"$and": [{"status": "open"}, {"$or": [{"created_at": {"$gt": t}},
              {"created_at": {"$eq": t}, "_id": {"$gt": i}}]}]}

becomes

    SELECT * FROM "tickets"
    WHERE (("status" = $1) AND ((("created_at" > $2) OR ("created_at" = $3 AND "id" > $4))))
    ORDER BY "created_at" ASC NULLS FIRST, "id" ASC NULLS FIRST
    LIMIT $5
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import asyncpg
from asyncpg import Pool

from ..errors.problem_details import InvalidParametersError, StoreFailureError
from .connection import get_db_pool


logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_COMPARISONS = {
    "$gt": ">",
    "$gte": ">=",
    "$lt": "<",
    "$lte": "<=",
}


def quote_identifier(name: str) -> str:
    """Quote a SQL identifier, allowing schema-qualified names."""
    parts = name.split(".")
    for part in parts:
        if not _IDENTIFIER.match(part):
            raise InvalidParametersError(f"Invalid SQL identifier: {name!r}")
    return ".".join(f'"{part}"' for part in parts)


class _WhereBuilder:
    """Accumulates positional parameters while rendering conditions."""
    
    def __init__(self, store: "PostgresDocumentStore"):
        self.store = store
        self.params: List[Any] = []
    
    def add(self, value: Any) -> str:
        self.params.append(value)
        return f"${len(self.params)}"
    
    def build(self, query: Dict[str, Any]) -> str:
        conditions = []
        
        for key, condition in query.items():
            if key in ("$and", "$or"):
                if not isinstance(condition, list) or not condition:
                    raise StoreFailureError(f"{key} expects a non-empty array of query documents")
                joiner = " AND " if key == "$and" else " OR "
                parts = [f"({self.build(sub_query)})" for sub_query in condition]
                conditions.append(f"({joiner.join(parts)})")
            elif key.startswith("$"):
                raise StoreFailureError(f"Unsupported query operator: {key}")
            elif isinstance(condition, dict) and condition and all(op.startswith("$") for op in condition):
                column = self.store.column(key)
                for op, operand in condition.items():
                    conditions.append(self.render(column, op, operand))
            else:
                conditions.append(self.render(self.store.column(key), "$eq", condition))
        
        return " AND ".join(conditions) if conditions else "TRUE"
    
    def render(self, column: str, op: str, operand: Any) -> str:
        if op == "$eq":
            if operand is None:
                return f"{column} IS NULL"
            return f"{column} = {self.add(operand)}"
        if op == "$ne":
            return f"{column} IS DISTINCT FROM {self.add(operand)}"
        if op in _COMPARISONS:
            return f"{column} {_COMPARISONS[op]} {self.add(operand)}"
        if op in ("$in", "$nin"):
            if not isinstance(operand, (list, tuple)):
                raise StoreFailureError(f"{op} expects an array")
            condition = f"{column} = ANY({self.add(list(operand))})"
            return condition if op == "$in" else f"NOT ({condition})"
        raise StoreFailureError(f"Unsupported query operator: {op}")


class PostgresDocumentStore:
    """Document store reading rows of a single PostgreSQL table.
    
    Args:
        table: Table name, optionally schema-qualified
        pool: asyncpg pool, defaults to the shared pool from get_db_pool()
        field_map: Document field to column name mapping; unmapped fields
            use their own name. Defaults to {"_id": "id"}.
    """
    
    def __init__(
        self,
        table: str,
        pool: Optional[Pool] = None,
        field_map: Optional[Dict[str, str]] = None
    ):
        self.table = quote_identifier(table)
        self._pool = pool
        self.field_map = {"_id": "id"} if field_map is None else dict(field_map)
        self._fields_by_column = {column: field for field, column in self.field_map.items()}
    
    def column(self, field: str) -> str:
        """Quoted column for a document field."""
        if "." in field:
            raise InvalidParametersError(
                f"Field path '{field}' does not resolve to a column"
            )
        return quote_identifier(self.field_map.get(field, field))
    
    def build_columns(self, projection: Optional[Dict[str, Any]]) -> str:
        """Render the select list for an inclusion projection."""
        if not projection:
            return "*"
        
        included = [field for field, flag in projection.items() if field != "_id" and flag]
        excluded = [field for field, flag in projection.items() if field != "_id" and not flag]
        if excluded or not included:
            raise InvalidParametersError("Only inclusion projections are supported")
        
        if projection.get("_id", True):
            included.insert(0, "_id")
        return ", ".join(self.column(field) for field in included)
    
    def build_select(
        self,
        query: Dict[str, Any],
        sort: List[Tuple[str, int]],
        limit: int,
        projection: Optional[Dict[str, Any]] = None
    ) -> Tuple[str, List[Any]]:
        """Build the SQL statement and its parameters.
        
        Returns:
            Tuple of (sql, parameters)
        """
        builder = _WhereBuilder(self)
        where_clause = builder.build(query)
        
        order_parts = []
        for field, sign in sort:
            # Nulls sort lowest in both directions
            order = "ASC NULLS FIRST" if sign > 0 else "DESC NULLS LAST"
            order_parts.append(f"{self.column(field)} {order}")
        
        sql = f"SELECT {self.build_columns(projection)} FROM {self.table} WHERE {where_clause}"
        if order_parts:
            sql += " ORDER BY " + ", ".join(order_parts)
        sql += f" LIMIT {builder.add(limit)}"
        
        return sql, builder.params
    
    def to_document(self, row: Any) -> Dict[str, Any]:
        """Convert a record into a document keyed by field names."""
        return {self._fields_by_column.get(column, column): value for column, value in dict(row).items()}
    
    async def find(
        self,
        query: Dict[str, Any],
        sort: List[Tuple[str, int]],
        limit: int,
        projection: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Return at most `limit` matching rows as documents in sort order.
        
        Raises:
            InvalidParametersError: If a field path or projection cannot be
                expressed in SQL
            StoreFailureError: If the database call fails
        """
        sql, params = self.build_select(query, sort, limit, projection)
        pool = self._pool or await get_db_pool()
        
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(sql, *params)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error paginating {self.table}: {e}")
            raise StoreFailureError(f"Database error: {e}") from e
        
        logger.debug(f"Fetched {len(rows)} rows from {self.table}")
        return [self.to_document(row) for row in rows]
