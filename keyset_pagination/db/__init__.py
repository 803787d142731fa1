"""Document store bindings."""

from .base import DocumentStore
from .memory import InMemoryDocumentStore
from .postgres import PostgresDocumentStore
from .connection import DatabaseManager, db_manager, get_db_pool

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "PostgresDocumentStore",
    "DatabaseManager",
    "db_manager",
    "get_db_pool"
]
