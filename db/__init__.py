"""
Database package for Mdluex Search.
Provides the SQLAlchemy engine, table definitions and key/value repository functions.
"""

from db.engine import create_db_engine
from db.repository import delete_prefix, get_value, get_values, set_value
from db.tables import kv_store, metadata

__all__ = [
    "create_db_engine",
    "delete_prefix",
    "get_value",
    "get_values",
    "kv_store",
    "metadata",
    "set_value",
]
