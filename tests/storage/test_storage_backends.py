from __future__ import annotations

import json

import pytest

from employee_portal.storage.file_storage import JsonFileStorage
from employee_portal.storage.memory_storage import InMemoryStorage
from employee_portal.storage.mysql_storage import MySQLStorage
from employee_portal.store.store import Store


class FakeCursor:
    def __init__(self, table: dict):
        self._table = table
        self._row = None

    def execute(self, sql, params=()):
        sql = " ".join(sql.split())
        self._row = None
        if sql.startswith("SELECT"):
            key = params[0]
            self._row = {"item_value": self._table[key]} if key in self._table else None
        elif sql.startswith("INSERT"):
            key, value = params
            self._table[key] = value
        elif sql.startswith("DELETE"):
            self._table.pop(params[0], None)
        else:
            raise AssertionError(f"unexpected SQL: {sql}")

    def fetchone(self):
        return self._row

    def close(self):
        pass


class FakeConnection:
    def __init__(self, table: dict):
        self._table = table
        self.committed = 0
        self.closed = False

    def cursor(self, dictionary=False):
        assert dictionary is True
        return FakeCursor(self._table)

    def commit(self):
        self.committed += 1

    def rollback(self):
        pass

    def close(self):
        self.closed = True


class FakeConnFactory:
    def __init__(self):
        self.table: dict = {}
        self.connections: list = []

    def connect(self):
        conn = FakeConnection(self.table)
        self.connections.append(conn)
        return conn


@pytest.fixture(params=["memory", "file", "mysql"])
def backend(request, tmp_path):
    if request.param == "memory":
        return InMemoryStorage()
    if request.param == "file":
        return JsonFileStorage(tmp_path / "store" / "local_storage.json")
    return MySQLStorage(FakeConnFactory())


def test_get_set_remove(backend):
    assert backend.get_item("k") is None
    backend.set_item("k", "v1")
    backend.set_item("k", "v2")
    assert backend.get_item("k") == "v2"
    backend.remove_item("k")
    assert backend.get_item("k") is None
    backend.remove_item("k")


def test_store_round_trips_through_backend(backend):
    store = Store(backend)
    store.initialize()
    store.create_department("Sales")

    reloaded = Store(backend)
    reloaded.initialize()
    assert [d.name for d in reloaded.departments()] == ["Engineering", "HR", "Sales"]


def test_file_storage_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "local_storage.json"
    path.write_text("{broken", encoding="utf-8")
    storage = JsonFileStorage(path)
    assert storage.get_item("anything") is None

    storage.set_item("k", "v")
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}
    assert not (tmp_path / "local_storage.json.tmp").exists()


def test_mysql_storage_commits_and_closes_each_operation():
    factory = FakeConnFactory()
    storage = MySQLStorage(factory)
    storage.set_item("k", "v")
    assert storage.get_item("k") == "v"
    assert all(c.closed for c in factory.connections)
    assert all(c.committed == 1 for c in factory.connections)
