"""
Table definitions.

A single key/value table backs both the persisted settings and the page
cache; the two are kept apart by key prefix.
"""

from sqlalchemy import Column, DateTime, Engine, MetaData, String, Table, Text, func

metadata = MetaData()

kv_store = Table(
    "kv_store",
    metadata,
    Column("key", String(512), primary_key=True),
    Column("value", Text, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)


def create_tables(engine: Engine) -> None:
    """Create missing tables; existing ones are left untouched."""
    metadata.create_all(engine, checkfirst=True)
