"""Storage layer — SQLite database access and schema management."""

from newshub.storage.connection import get_connection
from newshub.storage.schema import init_db

__all__ = ["get_connection", "init_db"]
