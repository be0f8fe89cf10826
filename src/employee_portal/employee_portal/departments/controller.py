from __future__ import annotations

from flask import Flask, jsonify

from ..common.guards import make_guards, payload
from .model import Department


def department_view(department: Department) -> dict:
    return {"id": department.dept_id, "name": department.name, "description": department.description}


def register(app: Flask, container) -> None:
    login_required, admin_required = make_guards(container)

    @app.route("/api/departments", methods=["GET"], endpoint="list_departments")
    @login_required
    def list_departments():
        return jsonify([department_view(d) for d in container.store.departments()])

    @app.route("/api/departments", methods=["POST"], endpoint="add_department")
    @admin_required
    def add_department():
        data = payload()
        department = container.store.create_department(data.get("name", ""), data.get("description", ""))
        return jsonify(department_view(department)), 201

    @app.route("/api/departments/<int:dept_id>", methods=["PUT"], endpoint="edit_department")
    @admin_required
    def edit_department(dept_id: int):
        data = payload()
        department = container.store.update_department(
            dept_id, name=data.get("name"), description=data.get("description")
        )
        return jsonify(department_view(department))

    @app.route("/api/departments/<int:dept_id>", methods=["DELETE"], endpoint="delete_department")
    @admin_required
    def delete_department(dept_id: int):
        container.store.delete_department(dept_id)
        return jsonify({"ok": True})
