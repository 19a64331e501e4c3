from __future__ import annotations

from sqlalchemy import (
    MetaData,
    Table,
    Column,
    Integer,
    String,
    DateTime,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

connections = Table(
    "connections",
    metadata,
    Column("uuid", String(36), primary_key=True),  # account uuid
    Column("device_id", Integer, nullable=False),
    Column("password", String, nullable=False),
    Column("endpoint", String, nullable=False),  # push webhook URL
    Column("created_at", DateTime, nullable=False),
)


def create_registry_schema(engine: Engine) -> None:
    """Create the registry tables if they do not exist yet."""
    with engine.begin() as conn:
        metadata.create_all(conn)
