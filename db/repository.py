"""
Repository functions for the key/value table.

Design principles:
- Functions do NOT commit - callers wrap them in ``engine.begin()``
- SQLAlchemy Core (insert/select/update/delete), no ORM
"""

from sqlalchemy import Connection, delete, func, insert, select, update

from db.tables import kv_store


def get_value(conn: Connection, key: str) -> str | None:
    """
    Read one value.

    Returns:
        str | None: Stored value, or None when the key is absent
    """
    row = conn.execute(select(kv_store.c.value).where(kv_store.c.key == key)).first()
    return row[0] if row else None


def get_values(conn: Connection, keys: list[str]) -> dict[str, str]:
    """Read several values at once; absent keys are omitted from the result."""
    if not keys:
        return {}
    rows = conn.execute(select(kv_store.c.key, kv_store.c.value).where(kv_store.c.key.in_(keys)))
    return {key: value for key, value in rows}


def set_value(conn: Connection, key: str, value: str) -> None:
    """Insert or overwrite a value (last write wins)."""
    result = conn.execute(
        update(kv_store)
        .where(kv_store.c.key == key)
        .values(value=value, updated_at=func.now())
    )
    if result.rowcount == 0:
        conn.execute(insert(kv_store).values(key=key, value=value))


def delete_prefix(conn: Connection, prefix: str) -> int:
    """
    Delete every key starting with ``prefix``.

    Returns:
        int: Number of removed rows
    """
    result = conn.execute(delete(kv_store).where(kv_store.c.key.startswith(prefix, autoescape=True)))
    return result.rowcount
