from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterable, List

from ..core.constants import EMPLOYEE_ID_PREFIX, UNKNOWN_DEPARTMENT
from ..requests.model import Request

if TYPE_CHECKING:
    from ..store.store import Store

_TRAILING_NUMBER = re.compile(r"(\d+)$")


def next_employee_id(existing_ids: Iterable[str]) -> str:
    """Next id after the highest trailing number among `existing_ids`.

    Stays in the bare numeric style while every id is purely numeric and
    switches to the zero-padded `EMP-###` style otherwise.
    """

    ids = [str(i).strip() for i in existing_ids]
    highest = 0
    for employee_id in ids:
        match = _TRAILING_NUMBER.search(employee_id)
        if match:
            highest = max(highest, int(match.group(1)))

    if all(i.isdigit() for i in ids):
        return str(highest + 1)
    return f"{EMPLOYEE_ID_PREFIX}{highest + 1:03d}"


def _newest_first(requests: Iterable[Request]) -> List[Request]:
    return sorted(requests, key=lambda r: r.created_at, reverse=True)


class QueryHelpers:
    """Read-only views over the store, used by the presentation layer."""

    def __init__(self, store: "Store"):
        self._store = store

    def next_employee_id(self) -> str:
        return next_employee_id(e.employee_id for e in self._store.employees())

    def department_name(self, dept_id: int) -> str:
        department = self._store.get_department(dept_id)
        return department.name if department else UNKNOWN_DEPARTMENT

    def requests_for_account(self, email: str) -> List[Request]:
        account = self._store.find_account(email)
        if not account:
            return []
        return _newest_first(r for r in self._store.requests() if r.employee_email == account.email)

    def all_requests_sorted(self) -> List[Request]:
        return _newest_first(self._store.requests())

    def employee_rows(self) -> List[dict]:
        """Employees joined with their account name and department name."""

        out: List[dict] = []
        for e in self._store.employees():
            account = self._store.find_account(e.user_email)
            out.append(
                {
                    "id": e.employee_id,
                    "email": e.user_email,
                    "full_name": account.full_name if account else "-",
                    "position": e.position or "-",
                    "department": self.department_name(e.dept_id),
                    "department_id": e.dept_id,
                    "hire_date": e.hire_date or "-",
                }
            )
        return out
