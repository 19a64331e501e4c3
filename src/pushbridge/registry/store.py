from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from urllib.parse import urlencode

from sqlalchemy import create_engine, delete, insert, select
from sqlalchemy.engine import Engine, RowMapping
from sqlalchemy.orm import Session

from ..config import DatabaseSettings, endpoint_allowed, validate_endpoint_url
from .schema import connections, create_registry_schema


class RegistryError(Exception):
    """Base exception for connection registry errors."""
    pass


class ConnectionNotFound(RegistryError):
    pass


class ConnectionExists(RegistryError):
    pass


class EndpointNotAllowed(RegistryError):
    pass


@dataclass(frozen=True, slots=True)
class ConnectionInfo:
    """A registered account and the webhook to notify for it."""

    uuid: str
    device_id: int
    password: str
    endpoint: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: RowMapping) -> "ConnectionInfo":
        return cls(
            uuid=row["uuid"],
            device_id=int(row["device_id"]),
            password=row["password"],
            endpoint=row["endpoint"],
            created_at=row["created_at"],
        )


def create_registry_engine(settings: DatabaseSettings) -> Engine:
    """Open the registry database and make sure its tables exist."""
    engine = create_engine(settings.url)
    create_registry_schema(engine)
    return engine


def build_websocket_url(base_url: str, info: ConnectionInfo) -> str:
    """
    Return the authenticated websocket URL for ``info``.

    Credentials travel in the query string as
    ``login=<uuid>.<device_id>&password=<password>``.
    """
    query = urlencode({"login": f"{info.uuid}.{info.device_id}", "password": info.password})
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{query}"


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


def add_connection(
    session: Session,
    uuid: str,
    device_id: int,
    password: str,
    endpoint: str,
    *,
    allowed_endpoints: Iterable[str] = ("*",),
) -> ConnectionInfo:
    """
    Register a new connection.

    Raises ConfigError for a malformed endpoint, EndpointNotAllowed when
    it falls outside ``allowed_endpoints`` and ConnectionExists if the
    uuid is already registered.
    """
    validate_endpoint_url(endpoint)
    if not endpoint_allowed(endpoint, allowed_endpoints):
        raise EndpointNotAllowed(f"endpoint {endpoint!r} is not allowed")

    existing = session.execute(
        select(connections.c.uuid).where(connections.c.uuid == uuid)
    ).first()
    if existing is not None:
        raise ConnectionExists(f"connection {uuid!r} already registered")

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    session.execute(
        insert(connections).values(
            uuid=uuid,
            device_id=device_id,
            password=password,
            endpoint=endpoint,
            created_at=now,
        )
    )
    return ConnectionInfo(uuid, device_id, password, endpoint, now)


def remove_connection(session: Session, uuid: str) -> None:
    result = session.execute(delete(connections).where(connections.c.uuid == uuid))
    if result.rowcount == 0:
        raise ConnectionNotFound(f"no connection {uuid!r}")


def get_connection(session: Session, uuid: str) -> ConnectionInfo:
    row = session.execute(
        select(connections).where(connections.c.uuid == uuid)
    ).mappings().first()
    if row is None:
        raise ConnectionNotFound(f"no connection {uuid!r}")
    return ConnectionInfo.from_row(row)


def list_connections(session: Session) -> List[ConnectionInfo]:
    rows = session.execute(
        select(connections).order_by(connections.c.created_at, connections.c.uuid)
    ).mappings()
    return [ConnectionInfo.from_row(row) for row in rows]
