"""Pydantic models for pagination requests, plans and connections."""

from enum import Enum
from typing import Optional, Dict, Any, List, Tuple

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Direction(str, Enum):
    """Sort direction of a single sort key."""
    
    ASC = "asc"
    DESC = "desc"
    
    @property
    def sign(self) -> int:
        """Store-native sort sign (1 ascending, -1 descending)."""
        return 1 if self is Direction.ASC else -1
    
    def inverse(self) -> "Direction":
        """Return the opposite direction."""
        return Direction.DESC if self is Direction.ASC else Direction.ASC
    
    @classmethod
    def parse(cls, value: Any) -> "Direction":
        """Parse 'asc'/'desc' (any case) or 1/-1 into a Direction."""
        if isinstance(value, Direction):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid sort direction: {value!r}")
        if isinstance(value, int):
            if value == 1:
                return cls.ASC
            if value == -1:
                return cls.DESC
        if isinstance(value, str) and value.lower() in ("asc", "desc"):
            return cls(value.lower())
        raise ValueError(f"Invalid sort direction: {value!r}")


def validate_field_path(path: str) -> str:
    """Check that a dot-addressable field path has no empty segments."""
    if not isinstance(path, str) or not path or any(not part for part in path.split(".")):
        raise ValueError(f"Invalid field path: {path!r}")
    return path


class SortKey(BaseModel):
    """A field path paired with a sort direction."""
    
    field: str = Field(description="Dot-addressable field path")
    direction: Direction = Field(default=Direction.ASC, description="Sort direction")
    
    model_config = ConfigDict(frozen=True)
    
    @model_validator(mode="before")
    @classmethod
    def from_pair(cls, data: Any) -> Any:
        """Accept (field, direction) pairs as well as mappings."""
        if isinstance(data, (tuple, list)):
            if len(data) != 2:
                raise ValueError("Sort key pairs must be (field, direction)")
            return {"field": data[0], "direction": data[1]}
        return data
    
    @field_validator("field")
    @classmethod
    def check_field(cls, v):
        return validate_field_path(v)
    
    @field_validator("direction", mode="before")
    @classmethod
    def check_direction(cls, v):
        return Direction.parse(v)
    
    def inverted(self) -> "SortKey":
        """Return this key with the opposite direction."""
        return SortKey(field=self.field, direction=self.direction.inverse())


class Position(BaseModel):
    """Where a document sits in a sort order.
    
    One (field, value) pair per sort key of the active sort, most significant
    first, the tie-breaker last.
    """
    
    entries: List[Tuple[str, Any]] = Field(description="Ordered (field, value) pairs")
    
    model_config = ConfigDict(frozen=True)
    
    @property
    def fields(self) -> List[str]:
        return [name for name, _ in self.entries]
    
    @property
    def values(self) -> List[Any]:
        return [value for _, value in self.entries]


class PaginationParams(BaseModel):
    """Relay-style pagination request."""
    
    first: Optional[int] = Field(default=None, description="Page size when paginating forwards")
    after: Optional[str] = Field(default=None, description="Cursor to paginate forwards from")
    last: Optional[int] = Field(default=None, description="Page size when paginating backwards")
    before: Optional[str] = Field(default=None, description="Cursor to paginate backwards from")
    query: Dict[str, Any] = Field(default_factory=dict, description="Base filter, passed through untouched")
    sort: Optional[List[SortKey]] = Field(default=None, description="Sort order, most significant first")
    paginated_field: Optional[str] = Field(default=None, description="Single sort field, alternative to sort")
    direction: Direction = Field(default=Direction.ASC, description="Direction of paginated_field")
    projection: Optional[Dict[str, Any]] = Field(default=None, description="Field selection, passed through untouched")
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "first": 2,
                "after": "eyJwb3NpdGlvbiI6W1siY3JlYXRlZEF0IiwxXSxbIl9pZCIsMl1dfQ",
                "query": {"status": "published"},
                "sort": [{"field": "createdAt", "direction": "asc"}]
            }
        }
    )
    
    @field_validator("direction", mode="before")
    @classmethod
    def check_direction(cls, v):
        return Direction.parse(v)
    
    @field_validator("paginated_field")
    @classmethod
    def check_paginated_field(cls, v):
        return v if v is None else validate_field_path(v)
    
    @property
    def paginating_backwards(self) -> bool:
        """A non-null `last` selects backward mode."""
        return self.last is not None


class PaginationPlan(BaseModel):
    """Canonical execution plan produced from PaginationParams."""
    
    limit: int = Field(ge=1)
    cursor: Optional[Position] = None
    sort: List[SortKey] = Field(description="Declared sort including the tie-breaker")
    execution_sort: List[SortKey] = Field(description="Sort sent to the store")
    paginating_backwards: bool = False
    
    model_config = ConfigDict(frozen=True)


class _RelayModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Edge(_RelayModel):
    """A document together with the cursor of its position."""
    
    cursor: str = Field(description="Opaque cursor for this node")
    node: Any = Field(description="The document, unmodified")


class PageInfo(_RelayModel):
    """Relay page metadata."""
    
    start_cursor: Optional[str] = Field(default=None, description="Cursor of the first edge")
    end_cursor: Optional[str] = Field(default=None, description="Cursor of the last edge")
    has_previous_page: bool = Field(description="Whether documents exist before this page")
    has_next_page: bool = Field(description="Whether documents exist after this page")


class Connection(_RelayModel):
    """Edges plus page info."""
    
    edges: List[Edge] = Field(default_factory=list)
    page_info: PageInfo
    
    @property
    def nodes(self) -> List[Any]:
        return [edge.node for edge in self.edges]
