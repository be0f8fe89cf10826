from __future__ import annotations

from flask import Flask, jsonify

from ..common.guards import make_guards, payload
from ..core.exceptions import ValidationError
from .model import Employee


def employee_view(employee: Employee) -> dict:
    return {
        "id": employee.employee_id,
        "userId": employee.user_id,
        "userEmail": employee.user_email,
        "departmentId": employee.dept_id,
        "position": employee.position,
        "hireDate": employee.hire_date,
    }


def _dept_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Department is required")


def register(app: Flask, container) -> None:
    _, admin_required = make_guards(container)

    @app.route("/api/employees", methods=["GET"], endpoint="list_employees")
    @admin_required
    def list_employees():
        return jsonify(
            {"employees": container.queries.employee_rows(), "nextId": container.queries.next_employee_id()}
        )

    @app.route("/api/employees", methods=["POST"], endpoint="add_employee")
    @admin_required
    def add_employee():
        data = payload()
        employee = container.store.create_employee(
            user_email=data.get("userEmail", ""),
            dept_id=_dept_id(data.get("departmentId")),
            position=data.get("position", ""),
            hire_date=data.get("hireDate", ""),
        )
        return jsonify(employee_view(employee)), 201

    @app.route("/api/employees/<employee_id>", methods=["PUT"], endpoint="edit_employee")
    @admin_required
    def edit_employee(employee_id: str):
        data = payload()
        employee = container.store.update_employee(
            employee_id,
            new_id=data.get("id"),
            user_email=data.get("userEmail"),
            dept_id=_dept_id(data["departmentId"]) if "departmentId" in data else None,
            position=data.get("position"),
            hire_date=data.get("hireDate"),
        )
        return jsonify(employee_view(employee))

    @app.route("/api/employees/<employee_id>", methods=["DELETE"], endpoint="delete_employee")
    @admin_required
    def delete_employee(employee_id: str):
        container.store.delete_employee(employee_id)
        return jsonify({"ok": True})
