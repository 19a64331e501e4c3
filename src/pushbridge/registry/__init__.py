from .schema import connections, create_registry_schema
from .store import (
    ConnectionExists,
    ConnectionInfo,
    ConnectionNotFound,
    EndpointNotAllowed,
    RegistryError,
    add_connection,
    build_websocket_url,
    create_registry_engine,
    get_connection,
    list_connections,
    remove_connection,
)

__all__ = [
    "connections",
    "create_registry_schema",
    "ConnectionExists",
    "ConnectionInfo",
    "ConnectionNotFound",
    "EndpointNotAllowed",
    "RegistryError",
    "add_connection",
    "build_websocket_url",
    "create_registry_engine",
    "get_connection",
    "list_connections",
    "remove_connection",
]
