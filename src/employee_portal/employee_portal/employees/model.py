from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Employee:
    employee_id: str
    user_id: int
    user_email: str
    dept_id: int
    position: str
    hire_date: str
