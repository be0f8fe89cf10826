from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..accounts.model import Account
from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_non_empty
from ..core.constants import DB_STORAGE_KEY, LEGACY_ACCOUNTS_KEY, PENDING_VERIFICATION_KEY
from ..core.enums import RequestStatus, RequestType, Role
from ..core.exceptions import (
    DepartmentInUseError,
    DuplicateEmailError,
    DuplicateIdError,
    DuplicateNameError,
    InvalidLinkError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from ..departments.model import Department
from ..employees.model import Employee
from ..queries.helpers import next_employee_id
from ..requests.model import Request, RequestItem
from ..storage.repository import KeyValueStorage
from .migration import migrate_snapshot, next_timestamp_id
from .normalizers import (
    account_to_wire,
    canonical_email,
    department_to_wire,
    employee_to_wire,
    normalize_account,
    normalize_department,
    normalize_employee,
    normalize_request,
)
from .snapshot import Database

logger = logging.getLogger(__name__)

ItemInput = Union[RequestItem, Dict[str, Any], Tuple[str, int]]


def _coerce(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {label}: {value!r}")


class Store:
    """Owns the in-memory database and writes it through to storage.

    Every command validates first and mutates second, so a failed command leaves
    the collections untouched. Every successful mutation persists the full
    snapshot before returning.
    """

    def __init__(self, storage: KeyValueStorage, *, snapshot_key: str = DB_STORAGE_KEY):
        self._storage = storage
        self._snapshot_key = snapshot_key
        self._db: Optional[Database] = None

    # Lifecycle

    @property
    def db(self) -> Database:
        if self._db is None:
            raise RuntimeError("Store.initialize() must be called before use")
        return self._db

    def initialize(self) -> None:
        self._db = migrate_snapshot(
            self._storage.get_item(self._snapshot_key),
            snapshot_key=self._snapshot_key,
            legacy_accounts_text=self._storage.get_item(LEGACY_ACCOUNTS_KEY),
            legacy_key=LEGACY_ACCOUNTS_KEY,
        )
        self.persist()
        logger.info(
            "Store ready: %d accounts, %d departments, %d employees, %d requests",
            len(self._db.accounts),
            len(self._db.departments),
            len(self._db.employees),
            len(self._db.requests),
        )

    def persist(self) -> None:
        self._storage.set_item(self._snapshot_key, json.dumps(self.db.to_wire()))

    def export_snapshot(self) -> Dict[str, Any]:
        return self.db.to_wire()

    # Reads

    def accounts(self) -> List[Account]:
        return list(self.db.accounts)

    def departments(self) -> List[Department]:
        return list(self.db.departments)

    def employees(self) -> List[Employee]:
        return list(self.db.employees)

    def requests(self) -> List[Request]:
        return list(self.db.requests)

    def find_account(self, email: str) -> Optional[Account]:
        key = canonical_email(email)
        return next((a for a in self.db.accounts if a.email == key), None)

    def get_department(self, dept_id: int) -> Optional[Department]:
        return next((d for d in self.db.departments if d.dept_id == dept_id), None)

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        return next((e for e in self.db.employees if e.employee_id == employee_id), None)

    def get_request(self, request_id: int) -> Optional[Request]:
        return next((r for r in self.db.requests if r.request_id == request_id), None)

    # Pending verification slot

    def pending_verification_email(self) -> Optional[str]:
        return canonical_email(self._storage.get_item(PENDING_VERIFICATION_KEY)) or None

    def set_pending_verification(self, email: str) -> None:
        self._storage.set_item(PENDING_VERIFICATION_KEY, canonical_email(email))

    def clear_pending_verification(self) -> None:
        self._storage.remove_item(PENDING_VERIFICATION_KEY)

    # Accounts

    def _account_index(self, email: str) -> int:
        key = canonical_email(email)
        for i, account in enumerate(self.db.accounts):
            if account.email == key:
                return i
        raise NotFoundError(f"Account {key!r} not found")

    def create_account(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        role: Role = Role.USER,
        verified: bool = False,
    ) -> Account:
        key = canonical_email(require_non_empty(email, "Email"))
        role = _coerce(Role, role, "account role")
        if self.find_account(key):
            raise DuplicateEmailError(f"Email {key!r} is already registered")

        account = normalize_account(
            {
                "id": next_timestamp_id([a.account_id for a in self.db.accounts]),
                "firstName": first_name,
                "lastName": last_name,
                "email": key,
                "password": password,
                "role": role,
                "verified": verified,
            }
        )
        self.db.accounts.append(account)
        self.persist()
        return account

    def update_account(
        self,
        original_email: str,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        role: Optional[Role] = None,
        verified: Optional[bool] = None,
    ) -> Account:
        index = self._account_index(original_email)
        current = self.db.accounts[index]
        if role is not None:
            role = _coerce(Role, role, "account role")

        new_email = current.email
        if email is not None:
            new_email = canonical_email(require_non_empty(email, "Email"))
            if new_email != current.email and self.find_account(new_email):
                raise DuplicateEmailError(f"Email {new_email!r} is already registered")

        if role == Role.ADMIN and current.role != Role.ADMIN:
            if any(e.user_email == current.email for e in self.db.employees):
                raise InvalidLinkError("Admins cannot hold an employee record; remove it first")

        patch = account_to_wire(current)
        patch["email"] = new_email
        if first_name is not None:
            patch["firstName"] = first_name
        if last_name is not None:
            patch["lastName"] = last_name
        if password is not None:
            patch["password"] = password
        if role is not None:
            patch["role"] = role
        if verified is not None:
            patch["verified"] = verified
        updated = normalize_account(patch)

        self.db.accounts[index] = updated
        if updated.email != current.email:
            self._cascade_email_rename(current.email, updated.email)
        self.persist()
        return updated

    def _cascade_email_rename(self, old: str, new: str) -> None:
        self.db.employees = [
            replace(e, user_email=new) if e.user_email == old else e for e in self.db.employees
        ]
        self.db.requests = [
            replace(r, employee_email=new) if r.employee_email == old else r for r in self.db.requests
        ]
        if self.pending_verification_email() == old:
            self.set_pending_verification(new)
        logger.info("Renamed account %s -> %s", old, new)

    def delete_account(self, email: str) -> None:
        index = self._account_index(email)
        removed = self.db.accounts.pop(index)
        self.db.employees = [e for e in self.db.employees if e.user_email != removed.email]
        if self.pending_verification_email() == removed.email:
            self.clear_pending_verification()
        self.persist()
        logger.info("Deleted account %s", removed.email)

    # Departments

    def _check_department_name(self, name: str, *, exclude_id: Optional[int] = None) -> str:
        name = require_non_empty(name, "Department name")
        folded = name.casefold()
        for d in self.db.departments:
            if d.dept_id != exclude_id and d.name.casefold() == folded:
                raise DuplicateNameError(f"Department {d.name!r} already exists")
        return name

    def create_department(self, name: str, description: str = "") -> Department:
        name = self._check_department_name(name)
        dept_id = max((d.dept_id for d in self.db.departments), default=0) + 1
        department = normalize_department({"id": dept_id, "name": name, "description": description})
        self.db.departments.append(department)
        self.persist()
        return department

    def update_department(
        self,
        dept_id: int,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Department:
        current = self.get_department(dept_id)
        if not current:
            raise NotFoundError(f"Department {dept_id} not found")

        patch = department_to_wire(current)
        if name is not None:
            patch["name"] = self._check_department_name(name, exclude_id=dept_id)
        if description is not None:
            patch["description"] = description
        updated = normalize_department(patch)

        self.db.departments = [updated if d.dept_id == dept_id else d for d in self.db.departments]
        self.persist()
        return updated

    def delete_department(self, dept_id: int) -> None:
        if not self.get_department(dept_id):
            raise NotFoundError(f"Department {dept_id} not found")
        if any(e.dept_id == dept_id for e in self.db.employees):
            raise DepartmentInUseError("Department has employees assigned; reassign them first")
        self.db.departments = [d for d in self.db.departments if d.dept_id != dept_id]
        self.persist()

    # Employees

    def _resolve_links(self, user_email: str, dept_id: int) -> Account:
        account = self.find_account(user_email)
        if not account:
            raise InvalidLinkError(f"No account with email {canonical_email(user_email)!r}")
        if account.role == Role.ADMIN:
            raise InvalidLinkError("Admin accounts cannot be linked to an employee record")
        if not self.get_department(dept_id):
            raise InvalidLinkError(f"Department {dept_id} does not exist")
        return account

    @staticmethod
    def _check_hire_date(hire_date: str) -> str:
        hire_date = (hire_date or "").strip()
        if hire_date:
            parse_iso_date(hire_date)
        return hire_date

    def create_employee(
        self,
        *,
        user_email: str,
        dept_id: int,
        position: str = "",
        hire_date: str = "",
    ) -> Employee:
        account = self._resolve_links(user_email, dept_id)
        hire_date = self._check_hire_date(hire_date)

        employee = normalize_employee(
            {
                "id": next_employee_id(e.employee_id for e in self.db.employees),
                "userId": account.account_id,
                "userEmail": account.email,
                "departmentId": dept_id,
                "position": position,
                "hireDate": hire_date,
            }
        )
        self.db.employees.append(employee)
        self.persist()
        return employee

    def update_employee(
        self,
        employee_id: str,
        *,
        new_id: Optional[str] = None,
        user_email: Optional[str] = None,
        dept_id: Optional[int] = None,
        position: Optional[str] = None,
        hire_date: Optional[str] = None,
    ) -> Employee:
        current = self.get_employee(employee_id)
        if not current:
            raise NotFoundError(f"Employee {employee_id!r} not found")

        target_id = current.employee_id
        if new_id is not None:
            target_id = require_non_empty(str(new_id), "Employee ID")
            if target_id != current.employee_id and self.get_employee(target_id):
                raise DuplicateIdError(f"Employee ID {target_id!r} is already in use")

        account = self._resolve_links(
            user_email if user_email is not None else current.user_email,
            dept_id if dept_id is not None else current.dept_id,
        )

        patch = employee_to_wire(current)
        patch.update({"id": target_id, "userId": account.account_id, "userEmail": account.email})
        if dept_id is not None:
            patch["departmentId"] = dept_id
        if position is not None:
            patch["position"] = position
        if hire_date is not None:
            patch["hireDate"] = self._check_hire_date(hire_date)
        updated = normalize_employee(patch)

        self.db.employees = [updated if e is current else e for e in self.db.employees]
        self.persist()
        return updated

    def delete_employee(self, employee_id: str) -> bool:
        before = len(self.db.employees)
        self.db.employees = [e for e in self.db.employees if e.employee_id != employee_id]
        if len(self.db.employees) == before:
            return False
        self.persist()
        return True

    # Requests

    @staticmethod
    def _item_dicts(items: Sequence[ItemInput]) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        for item in items:
            if isinstance(item, RequestItem):
                out.append({"name": item.name, "quantity": item.quantity})
            elif isinstance(item, tuple):
                name, quantity = item
                out.append({"name": name, "quantity": quantity})
            else:
                out.append(dict(item))
        return out

    def create_request(
        self,
        *,
        employee_email: str,
        request_type: RequestType,
        items: Sequence[ItemInput] = (),
        leave_start: str = "",
        leave_end: str = "",
        leave_reason: str = "",
    ) -> Request:
        account = self.find_account(employee_email)
        if not account:
            raise InvalidLinkError(f"No account with email {canonical_email(employee_email)!r}")

        request_id = next_timestamp_id([r.request_id for r in self.db.requests])
        request = normalize_request(
            {
                "id": request_id,
                "employeeEmail": account.email,
                "type": _coerce(RequestType, request_type, "request type"),
                "items": self._item_dicts(items),
                "leaveStart": leave_start,
                "leaveEnd": leave_end,
                "leaveReason": leave_reason,
                "status": RequestStatus.PENDING,
                "createdAt": request_id,
            }
        )

        if request.request_type == RequestType.EQUIPMENT and not request.items:
            raise ValidationError("Add at least one item to an equipment request")
        if request.request_type == RequestType.LEAVE:
            start = parse_iso_date(require_non_empty(request.leave_start, "Leave start"))
            end = parse_iso_date(require_non_empty(request.leave_end, "Leave end"))
            if end < start:
                raise ValidationError("Leave end must be on or after leave start")

        self.db.requests.append(request)
        self.persist()
        return request

    def update_request_status(self, request_id: int, status: RequestStatus) -> Request:
        current = self.get_request(request_id)
        if not current:
            raise NotFoundError(f"Request {request_id} not found")

        status = _coerce(RequestStatus, status, "request status")
        if status == current.status:
            return current
        if current.status != RequestStatus.PENDING or status == RequestStatus.PENDING:
            raise InvalidTransitionError(
                f"Cannot move request from {current.status.value} to {status.value}"
            )

        updated = normalize_request(replace(current, status=status))
        self.db.requests = [updated if r.request_id == request_id else r for r in self.db.requests]
        self.persist()
        return updated

    def delete_request(self, request_id: int) -> bool:
        before = len(self.db.requests)
        self.db.requests = [r for r in self.db.requests if r.request_id != request_id]
        if len(self.db.requests) == before:
            return False
        self.persist()
        return True
