"""Canonicalize loosely-typed persisted records.

Every normalizer is total over mappings: missing or malformed fields become safe
defaults, and normalizing an already-normalized record is a no-op. A record
that is not a mapping at all is a programmer error and raises TypeError.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..accounts.model import Account
from ..common.datetime_utils import now_millis
from ..core.enums import RequestStatus, RequestType, Role
from ..departments.model import Department
from ..employees.model import Employee
from ..requests.model import Request, RequestItem

_TRUTHY = {"true", "1", "yes", "y", "on"}


def canonical_email(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


def coerce_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def coerce_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        v = value.strip()
        if v.lstrip("-").isdigit():
            return int(v)
    return None


def _bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return False


def _timestamp(value: Any) -> Optional[int]:
    # epoch millis, numeric string, or ISO-8601 text
    n = coerce_int(value)
    if n is not None:
        return n
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return int(datetime.fromisoformat(text).timestamp() * 1000)
        except ValueError:
            return None
    return None


def _choice(value: Any, enum_cls, default):
    text = coerce_text(value).lower()
    for member in enum_cls:
        if member.value.lower() == text:
            return member
    return default


def _as_mapping(raw: Any, record_cls: type, to_wire: Callable[[Any], Dict[str, Any]]) -> Mapping[str, Any]:
    if isinstance(raw, record_cls):
        return to_wire(raw)
    if not isinstance(raw, Mapping):
        raise TypeError(f"Cannot normalize {type(raw).__name__} into {record_cls.__name__}")
    return raw


# Wire format (camelCase, JSON-safe)


def account_to_wire(account: Account) -> Dict[str, Any]:
    return {
        "id": account.account_id,
        "firstName": account.first_name,
        "lastName": account.last_name,
        "email": account.email,
        "password": account.password,
        "role": account.role.value,
        "verified": account.verified,
    }


def department_to_wire(department: Department) -> Dict[str, Any]:
    return {"id": department.dept_id, "name": department.name, "description": department.description}


def employee_to_wire(employee: Employee) -> Dict[str, Any]:
    return {
        "id": employee.employee_id,
        "userId": employee.user_id,
        "userEmail": employee.user_email,
        "departmentId": employee.dept_id,
        "position": employee.position,
        "hireDate": employee.hire_date,
    }


def request_to_wire(request: Request) -> Dict[str, Any]:
    return {
        "id": request.request_id,
        "employeeEmail": request.employee_email,
        "type": request.request_type.value,
        "items": [{"name": i.name, "quantity": i.quantity} for i in request.items],
        "leaveStart": request.leave_start,
        "leaveEnd": request.leave_end,
        "leaveReason": request.leave_reason,
        "status": request.status.value,
        "createdAt": request.created_at,
    }


# Normalizers


def normalize_account(raw: Union[Mapping[str, Any], Account]) -> Account:
    data = _as_mapping(raw, Account, account_to_wire)
    account_id = coerce_int(data.get("id"))
    password = data.get("password")
    return Account(
        account_id=account_id if account_id is not None else now_millis(),
        first_name=coerce_text(data.get("firstName")),
        last_name=coerce_text(data.get("lastName")),
        email=canonical_email(data.get("email")),
        password=password if isinstance(password, str) else "",
        role=_choice(data.get("role"), Role, Role.USER),
        verified=_bool(data.get("verified")),
    )


def normalize_department(raw: Union[Mapping[str, Any], Department]) -> Department:
    data = _as_mapping(raw, Department, department_to_wire)
    dept_id = coerce_int(data.get("id"))
    return Department(
        dept_id=dept_id if dept_id is not None else now_millis(),
        name=coerce_text(data.get("name")),
        description=coerce_text(data.get("description")),
    )


def normalize_employee(raw: Union[Mapping[str, Any], Employee]) -> Employee:
    data = _as_mapping(raw, Employee, employee_to_wire)
    employee_id = coerce_text(data.get("id"))
    return Employee(
        employee_id=employee_id or str(now_millis()),
        user_id=coerce_int(data.get("userId")) or 0,
        user_email=canonical_email(data.get("userEmail")),
        dept_id=coerce_int(data.get("departmentId")) or 0,
        position=coerce_text(data.get("position")),
        hire_date=coerce_text(data.get("hireDate")),
    )


def _normalize_item(raw: Any) -> Optional[RequestItem]:
    if isinstance(raw, RequestItem):
        raw = {"name": raw.name, "quantity": raw.quantity}
    if not isinstance(raw, Mapping):
        return None
    name = coerce_text(raw.get("name"))
    if not name:
        return None
    quantity = coerce_int(raw.get("quantity", raw.get("qty")))
    return RequestItem(name=name, quantity=quantity if quantity and quantity > 0 else 1)


def normalize_request(raw: Union[Mapping[str, Any], Request]) -> Request:
    data = _as_mapping(raw, Request, request_to_wire)
    request_id = coerce_int(data.get("id"))
    if request_id is None:
        request_id = now_millis()
    request_type = _choice(data.get("type"), RequestType, RequestType.EQUIPMENT)
    is_leave = request_type == RequestType.LEAVE

    items = ()
    raw_items = data.get("items")
    if not is_leave and isinstance(raw_items, (list, tuple)):
        items = tuple(i for i in (_normalize_item(r) for r in raw_items) if i is not None)

    created_at = _timestamp(data.get("createdAt"))
    return Request(
        request_id=request_id,
        employee_email=canonical_email(data.get("employeeEmail")),
        request_type=request_type,
        items=items,
        leave_start=coerce_text(data.get("leaveStart")) if is_leave else "",
        leave_end=coerce_text(data.get("leaveEnd")) if is_leave else "",
        leave_reason=coerce_text(data.get("leaveReason")) if is_leave else "",
        status=_choice(data.get("status"), RequestStatus, RequestStatus.PENDING),
        created_at=created_at if created_at is not None else request_id,
    )
