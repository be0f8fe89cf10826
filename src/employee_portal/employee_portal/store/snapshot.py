from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..accounts.model import Account
from ..departments.model import Department
from ..employees.model import Employee
from ..requests.model import Request
from .normalizers import account_to_wire, department_to_wire, employee_to_wire, request_to_wire


@dataclass
class Database:
    """The in-memory database: four canonical collections, owned by the Store."""

    accounts: List[Account] = field(default_factory=list)
    departments: List[Department] = field(default_factory=list)
    employees: List[Employee] = field(default_factory=list)
    requests: List[Request] = field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        return {
            "accounts": [account_to_wire(a) for a in self.accounts],
            "departments": [department_to_wire(d) for d in self.departments],
            "employees": [employee_to_wire(e) for e in self.employees],
            "requests": [request_to_wire(r) for r in self.requests],
        }
