"""Boot-time migration: turn whatever is in storage into a canonical Database.

The rules, applied in order:
- absent / undecodable / non-object snapshot -> reseed (legacy accounts, when
  present, are carried over after the seeds)
- each collection is normalized; non-list collections count as empty and
  non-mapping entries are dropped; records without an id get a fresh one
- accounts are deduplicated by canonical email (first occurrence wins)
- seeded admins missing from the result are prepended in seed order
- departments are deduplicated by case-insensitive name, blank names dropped
- ids shared by several records are reassigned (first occurrence keeps it)
- employee rows with broken links are pruned
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from ..accounts.model import Account
from ..common.datetime_utils import now_millis
from ..core.constants import SEED_ACCOUNTS, SEED_DEPARTMENTS
from ..core.enums import Role
from ..departments.model import Department
from ..employees.model import Employee
from ..queries.helpers import next_employee_id
from .normalizers import (
    coerce_int,
    coerce_text,
    normalize_account,
    normalize_department,
    normalize_employee,
    normalize_request,
)
from .snapshot import Database

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Id allocators: each returns an id not present in `taken`.


def next_number_id(taken: Sequence[int]) -> int:
    return max(taken, default=0) + 1


def next_timestamp_id(taken: Sequence[int]) -> int:
    # Millisecond timestamps collide when two records are created in the same tick.
    return max([now_millis(), *(i + 1 for i in taken)])


def _decode(text: Optional[str], key: str) -> Any:
    if text is None:
        return None
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        logger.warning("Stored value under %r is not valid JSON; ignoring it", key)
        return None


def _mappings(raw: Any, collection: str) -> List[Dict[str, Any]]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Collection %r is %s, not a list; resetting it", collection, type(raw).__name__)
        return []
    out: List[Dict[str, Any]] = []
    for entry in raw:
        if not isinstance(entry, dict):
            logger.warning("Dropping malformed %s entry: %r", collection, entry)
            continue
        out.append(entry)
    return out


def fill_missing_ids(
    records: List[Dict[str, Any]],
    parse: Callable[[Any], Any],
    allocate: Callable[[Sequence[Any]], Any],
    collection: str,
) -> List[Dict[str, Any]]:
    parsed = [parse(r.get("id")) for r in records]
    taken = [p for p in parsed if p not in (None, "")]
    out: List[Dict[str, Any]] = []
    for record, record_id in zip(records, parsed):
        if record_id in (None, ""):
            record_id = allocate(taken)
            taken.append(record_id)
            logger.info("Assigned id %r to %s entry without one", record_id, collection)
            record = {**record, "id": record_id}
        out.append(record)
    return out


def ensure_unique_ids(
    records: Iterable[T],
    id_attr: str,
    allocate: Callable[[Sequence[Any]], Any],
    collection: str,
) -> List[T]:
    records = list(records)
    taken = [getattr(r, id_attr) for r in records]
    seen = set()
    out: List[T] = []
    for record in records:
        record_id = getattr(record, id_attr)
        if record_id in seen:
            new_id = allocate(taken)
            taken.append(new_id)
            logger.warning("Duplicate %s id %r; reassigned to %r", collection, record_id, new_id)
            record = replace(record, **{id_attr: new_id})
            record_id = new_id
        seen.add(record_id)
        out.append(record)
    return out


def _load(
    raw: Any,
    collection: str,
    parse: Callable[[Any], Any],
    allocate: Callable[[Sequence[Any]], Any],
    normalize: Callable[[Any], T],
) -> List[T]:
    records = fill_missing_ids(_mappings(raw, collection), parse, allocate, collection)
    return [normalize(r) for r in records]


def _load_accounts(raw: Any) -> List[Account]:
    return _load(raw, "accounts", coerce_int, next_timestamp_id, normalize_account)


def seed_accounts() -> List[Account]:
    return [normalize_account(a) for a in SEED_ACCOUNTS]


def dedupe_accounts(accounts: Iterable[Account]) -> List[Account]:
    seen = set()
    out: List[Account] = []
    for account in accounts:
        if not account.email:
            logger.warning("Dropping account %s without an email", account.account_id)
            continue
        if account.email in seen:
            logger.info("Dropping duplicate account for %s", account.email)
            continue
        seen.add(account.email)
        out.append(account)
    return out


def ensure_seed_admins(accounts: Sequence[Account]) -> List[Account]:
    present = {a.email for a in accounts}
    taken = [a.account_id for a in accounts]
    missing: List[Account] = []
    for account in seed_accounts():
        if account.role != Role.ADMIN or account.email in present:
            continue
        if account.account_id in taken:
            account = replace(account, account_id=next_timestamp_id(taken))
        taken.append(account.account_id)
        logger.info("Restoring seeded admin account %s", account.email)
        missing.append(account)
    return missing + list(accounts)


def dedupe_departments(departments: Iterable[Department]) -> List[Department]:
    seen = set()
    out: List[Department] = []
    for department in departments:
        if not department.name:
            logger.warning("Dropping department %s without a name", department.dept_id)
            continue
        folded = department.name.casefold()
        if folded in seen:
            logger.warning("Dropping duplicate department %r (id %s)", department.name, department.dept_id)
            continue
        seen.add(folded)
        out.append(department)
    return out


def prune_broken_employees(db: Database) -> List[Employee]:
    users = {a.email: a for a in db.accounts if a.role != Role.ADMIN}
    depts = {d.dept_id for d in db.departments}
    kept: List[Employee] = []
    for employee in db.employees:
        account = users.get(employee.user_email)
        if account and employee.dept_id in depts:
            if employee.user_id != account.account_id:
                employee = replace(employee, user_id=account.account_id)
            kept.append(employee)
        else:
            logger.warning(
                "Dropping employee %s with broken link (user=%r, department=%s)",
                employee.employee_id,
                employee.user_email,
                employee.dept_id,
            )
    return kept


def _legacy_accounts(raw: Any) -> List[Account]:
    # The legacy registry had no verification step: everyone in it could log in.
    records = []
    for entry in _mappings(raw, "legacy accounts"):
        data = dict(entry)
        data.setdefault("verified", True)
        data.setdefault("role", Role.USER.value)
        records.append(data)
    return _load_accounts(records)


def fresh_database(legacy_accounts_text: Optional[str] = None, *, legacy_key: str = "") -> Database:
    raw = _decode(legacy_accounts_text, legacy_key)
    legacy = _legacy_accounts(raw) if isinstance(raw, list) else []
    if legacy:
        logger.info("Migrating %d account(s) from legacy key %r", len(legacy), legacy_key)
    accounts = dedupe_accounts(seed_accounts() + legacy)
    return Database(
        accounts=ensure_unique_ids(accounts, "account_id", next_timestamp_id, "accounts"),
        departments=[normalize_department(d) for d in SEED_DEPARTMENTS],
    )


def migrate_snapshot(
    snapshot_text: Optional[str],
    *,
    snapshot_key: str,
    legacy_accounts_text: Optional[str] = None,
    legacy_key: str = "",
) -> Database:
    raw = _decode(snapshot_text, snapshot_key)
    if not isinstance(raw, dict):
        if snapshot_text is not None:
            logger.warning("Snapshot under %r is not an object; reseeding", snapshot_key)
        else:
            logger.info("No snapshot under %r; seeding defaults", snapshot_key)
        return fresh_database(legacy_accounts_text, legacy_key=legacy_key)

    accounts = ensure_seed_admins(dedupe_accounts(_load_accounts(raw.get("accounts"))))
    departments = dedupe_departments(
        _load(raw.get("departments"), "departments", coerce_int, next_number_id, normalize_department)
    )
    employees = _load(raw.get("employees"), "employees", coerce_text, next_employee_id, normalize_employee)
    requests = _load(raw.get("requests"), "requests", coerce_int, next_timestamp_id, normalize_request)

    db = Database(
        accounts=ensure_unique_ids(accounts, "account_id", next_timestamp_id, "accounts"),
        departments=ensure_unique_ids(departments, "dept_id", next_number_id, "departments"),
        employees=ensure_unique_ids(employees, "employee_id", next_employee_id, "employees"),
        requests=ensure_unique_ids(requests, "request_id", next_timestamp_id, "requests"),
    )
    db.employees = prune_broken_employees(db)
    return db
