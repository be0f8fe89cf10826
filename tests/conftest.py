from __future__ import annotations

import pytest

from employee_portal.container import build_container
from employee_portal.storage.memory_storage import InMemoryStorage
from employee_portal.store.store import Store


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    s = Store(storage)
    s.initialize()
    return s


@pytest.fixture
def container(storage):
    return build_container(storage=storage, verify_delay=0)


@pytest.fixture
def engineering(store):
    return next(d for d in store.departments() if d.name == "Engineering")


@pytest.fixture
def jo(store):
    return store.create_account(
        first_name="Jo", last_name="Lee", email="jo@x.com", password="secret1", verified=True
    )
