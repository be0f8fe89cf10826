from __future__ import annotations

import json

import pytest

from employee_portal.core.constants import DB_STORAGE_KEY, LEGACY_ACCOUNTS_KEY, SEED_ACCOUNTS
from employee_portal.core.enums import Role
from employee_portal.storage.memory_storage import InMemoryStorage
from employee_portal.store.store import Store

SEED_EMAILS = [a["email"] for a in SEED_ACCOUNTS]


def _boot(items: dict) -> tuple[Store, InMemoryStorage]:
    storage = InMemoryStorage(items)
    store = Store(storage)
    store.initialize()
    return store, storage


def _saved(storage: InMemoryStorage) -> dict:
    return json.loads(storage.get_item(DB_STORAGE_KEY))


def test_absent_storage_is_seeded_and_persisted():
    store, storage = _boot({})
    assert [a.email for a in store.accounts()] == SEED_EMAILS
    assert all(a.role == Role.ADMIN and a.verified for a in store.accounts())
    assert [d.name for d in store.departments()] == ["Engineering", "HR"]
    assert store.employees() == [] and store.requests() == []
    assert _saved(storage) == store.export_snapshot()


@pytest.mark.parametrize("raw", ["not json{", "[1, 2, 3]", "42", '"text"', "null"])
def test_corrupted_snapshot_is_reseeded(raw):
    store, _ = _boot({DB_STORAGE_KEY: raw})
    assert [a.email for a in store.accounts()] == SEED_EMAILS
    assert len(store.departments()) == 2


def test_existing_snapshot_is_normalized_deduplicated_and_admins_restored():
    snapshot = {
        "accounts": [
            {"id": 10, "email": " Jo@X.com ", "firstName": "Jo", "password": "p1", "verified": True},
            {"id": 11, "email": "jo@x.com", "firstName": "Duplicate"},
            "garbage",
            {"id": 12, "email": "manager@example.com", "role": "admin", "verified": True},
        ],
        "departments": [{"id": 5, "name": " Ops "}],
        "employees": "not a list",
        "requests": [{"id": 1, "employeeEmail": "JO@X.COM", "type": "Equipment", "items": [{"name": "Pen"}]}],
    }
    store, storage = _boot({DB_STORAGE_KEY: json.dumps(snapshot)})

    emails = [a.email for a in store.accounts()]
    assert emails == ["admin@example.com", "jo@x.com", "manager@example.com"]
    assert store.find_account("jo@x.com").first_name == "Jo"
    assert [d.name for d in store.departments()] == ["Ops"]
    assert store.employees() == []
    assert store.requests()[0].employee_email == "jo@x.com"
    assert _saved(storage)["accounts"][1]["email"] == "jo@x.com"


def test_seed_admins_present_exactly_once_after_any_boot():
    snapshot = {"accounts": [{"email": "ADMIN@example.com"}, {"email": "admin@example.com"}]}
    store, _ = _boot({DB_STORAGE_KEY: json.dumps(snapshot)})
    emails = [a.email for a in store.accounts()]
    for email in SEED_EMAILS:
        assert emails.count(email) == 1
    assert emails == ["manager@example.com", "admin@example.com"]


def test_broken_employee_links_are_pruned_on_boot():
    snapshot = {
        "accounts": [{"id": 3, "email": "jo@x.com"}, {"id": 4, "email": "boss@x.com", "role": "admin"}],
        "departments": [{"id": 1, "name": "Engineering"}],
        "employees": [
            {"id": "1", "userEmail": "jo@x.com", "departmentId": 1},
            {"id": "2", "userEmail": "ghost@x.com", "departmentId": 1},
            {"id": "3", "userEmail": "jo@x.com", "departmentId": 99},
            {"id": "4", "userEmail": "boss@x.com", "departmentId": 1},
        ],
    }
    store, _ = _boot({DB_STORAGE_KEY: json.dumps(snapshot)})
    assert [e.employee_id for e in store.employees()] == ["1"]


def test_legacy_accounts_are_migrated_when_no_snapshot_exists():
    legacy = [
        {"id": 1690000000000, "firstName": "Old", "lastName": "Timer", "email": "Old@X.com", "password": "pw1234"},
        {"email": "admin@example.com", "password": "hijack"},
    ]
    store, storage = _boot({LEGACY_ACCOUNTS_KEY: json.dumps(legacy)})

    old = store.find_account("old@x.com")
    assert old is not None and old.verified and old.role == Role.USER
    assert store.find_account("admin@example.com").password == "admin123"
    # legacy key is read-only: never rewritten
    assert json.loads(storage.get_item(LEGACY_ACCOUNTS_KEY)) == legacy


def test_legacy_accounts_ignored_once_snapshot_exists():
    legacy = [{"email": "old@x.com", "password": "pw1234"}]
    snapshot = {"accounts": [], "departments": [], "employees": [], "requests": []}
    store, _ = _boot({DB_STORAGE_KEY: json.dumps(snapshot), LEGACY_ACCOUNTS_KEY: json.dumps(legacy)})
    assert store.find_account("old@x.com") is None


def test_initialize_is_stable_across_reboots():
    store, storage = _boot({})
    store.create_account(first_name="Jo", last_name="Lee", email="jo@x.com", password="secret1")
    first = store.export_snapshot()

    again = Store(storage)
    again.initialize()
    assert again.export_snapshot() == first


def test_store_requires_initialize():
    with pytest.raises(RuntimeError):
        Store(InMemoryStorage()).accounts()


def test_departments_deduplicated_by_name_and_blank_names_dropped():
    snapshot = {
        "accounts": [{"id": 10, "email": "jo@x.com", "verified": True}],
        "departments": [
            {"id": 1, "name": "Engineering"},
            {"id": 2, "name": "engineering "},
            {"id": 3, "name": "   "},
        ],
        "employees": [
            {"id": "1", "userEmail": "jo@x.com", "departmentId": 1},
            {"id": "2", "userEmail": "jo@x.com", "departmentId": 2},
        ],
        "requests": [],
    }
    store, storage = _boot({DB_STORAGE_KEY: json.dumps(snapshot)})

    assert [(d.dept_id, d.name) for d in store.departments()] == [(1, "Engineering")]
    assert [e.employee_id for e in store.employees()] == ["1"]
    assert [d["name"] for d in _saved(storage)["departments"]] == ["Engineering"]


def test_records_without_ids_get_distinct_ids():
    snapshot = {
        "accounts": [{"email": "a@x.com"}, {"email": "b@x.com"}],
        "departments": [{"name": "Ops"}, {"name": "Sales"}, {"id": 4, "name": "Legal"}],
        "employees": [],
        "requests": [
            {"employeeEmail": "a@x.com", "type": "Equipment", "items": [{"name": "Pen"}]},
            {"employeeEmail": "b@x.com", "type": "Equipment", "items": [{"name": "Pad"}]},
        ],
    }
    store, _ = _boot({DB_STORAGE_KEY: json.dumps(snapshot)})

    assert [d.dept_id for d in store.departments()] == [5, 6, 4]
    account_ids = [a.account_id for a in store.accounts()]
    assert len(set(account_ids)) == len(account_ids)
    request_ids = [r.request_id for r in store.requests()]
    assert len(set(request_ids)) == 2


def test_duplicate_employee_ids_are_reassigned():
    snapshot = {
        "accounts": [{"id": 10, "email": "jo@x.com"}, {"id": 11, "email": "al@x.com"}],
        "departments": [{"id": 1, "name": "Engineering"}],
        "employees": [
            {"id": "7", "userEmail": "jo@x.com", "departmentId": 1},
            {"id": "7", "userEmail": "al@x.com", "departmentId": 1},
        ],
        "requests": [],
    }
    store, _ = _boot({DB_STORAGE_KEY: json.dumps(snapshot)})

    assert [e.employee_id for e in store.employees()] == ["7", "8"]
    assert store.delete_employee("7")
    assert [e.user_email for e in store.employees()] == ["al@x.com"]


def test_restored_seed_admin_does_not_reuse_a_taken_id():
    snapshot = {
        "accounts": [{"id": 1, "email": "jo@x.com", "verified": True}],
        "departments": [],
        "employees": [],
        "requests": [],
    }
    store, _ = _boot({DB_STORAGE_KEY: json.dumps(snapshot)})

    ids = {a.email: a.account_id for a in store.accounts()}
    assert ids["jo@x.com"] == 1
    assert ids["admin@example.com"] != 1
    assert ids["manager@example.com"] == 2
    assert len(set(ids.values())) == 3


def test_employee_user_id_follows_linked_account():
    snapshot = {
        "accounts": [{"id": 10, "email": "jo@x.com"}],
        "departments": [{"id": 1, "name": "Engineering"}],
        "employees": [{"id": "1", "userId": 99, "userEmail": "jo@x.com", "departmentId": 1}],
        "requests": [],
    }
    store, _ = _boot({DB_STORAGE_KEY: json.dumps(snapshot)})
    assert store.get_employee("1").user_id == 10
