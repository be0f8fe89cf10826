from __future__ import annotations

from dataclasses import dataclass

from .auth.service import AuthGate
from .core.constants import DEFAULT_VERIFY_DELAY_SECONDS
from .queries.helpers import QueryHelpers
from .session.manager import SessionManager
from .storage.connection import DatabaseConnection, as_db_config
from .storage.file_storage import JsonFileStorage
from .storage.memory_storage import InMemoryStorage
from .storage.mysql_storage import MySQLStorage
from .storage.repository import KeyValueStorage
from .store.store import Store


@dataclass(frozen=True)
class Container:
    storage: KeyValueStorage
    store: Store
    sessions: SessionManager
    auth_gate: AuthGate
    queries: QueryHelpers


def build_storage(*, backend: str, path: str = "", db_config: dict | None = None) -> KeyValueStorage:
    backend = (backend or "file").lower()
    if backend == "memory":
        return InMemoryStorage()
    if backend == "file":
        return JsonFileStorage(path or "local_storage.json")
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(as_db_config(db_config or {}))
        return MySQLStorage(conn)
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")


def build_container(
    *,
    storage: KeyValueStorage,
    verify_delay: float = DEFAULT_VERIFY_DELAY_SECONDS,
) -> Container:
    store = Store(storage)
    store.initialize()

    sessions = SessionManager(store, storage)
    auth_gate = AuthGate(store, sessions, verify_delay=verify_delay)
    queries = QueryHelpers(store)

    return Container(
        storage=storage,
        store=store,
        sessions=sessions,
        auth_gate=auth_gate,
        queries=queries,
    )
