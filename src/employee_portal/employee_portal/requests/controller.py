from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.guards import make_guards, payload
from ..core.enums import RequestStatus
from .model import Request


def request_view(req: Request) -> dict:
    return {
        "id": req.request_id,
        "employeeEmail": req.employee_email,
        "type": req.request_type.value,
        "items": [{"name": i.name, "quantity": i.quantity} for i in req.items],
        "leaveStart": req.leave_start,
        "leaveEnd": req.leave_end,
        "leaveReason": req.leave_reason,
        "status": req.status.value,
        "createdAt": req.created_at,
    }


def register(app: Flask, container) -> None:
    login_required, admin_required = make_guards(container)

    @app.route("/api/requests/mine", methods=["GET"], endpoint="my_requests")
    @login_required
    def my_requests():
        rows = container.queries.requests_for_account(g.current_account.email)
        return jsonify([request_view(r) for r in rows])

    @app.route("/api/requests", methods=["POST"], endpoint="submit_request")
    @login_required
    def submit_request():
        data = payload()
        items = data.get("items") or []
        req = container.store.create_request(
            employee_email=g.current_account.email,
            request_type=data.get("type", ""),
            items=[i for i in items if isinstance(i, dict)],
            leave_start=data.get("leaveStart", ""),
            leave_end=data.get("leaveEnd", ""),
            leave_reason=data.get("leaveReason", ""),
        )
        return jsonify(request_view(req)), 201

    @app.route("/api/requests", methods=["GET"], endpoint="all_requests")
    @admin_required
    def all_requests():
        return jsonify([request_view(r) for r in container.queries.all_requests_sorted()])

    @app.route("/api/requests/<int:request_id>/approve", methods=["POST"], endpoint="approve_request")
    @admin_required
    def approve_request(request_id: int):
        req = container.store.update_request_status(request_id, RequestStatus.APPROVED)
        return jsonify(request_view(req))

    @app.route("/api/requests/<int:request_id>/reject", methods=["POST"], endpoint="reject_request")
    @admin_required
    def reject_request(request_id: int):
        req = container.store.update_request_status(request_id, RequestStatus.REJECTED)
        return jsonify(request_view(req))

    @app.route("/api/requests/<int:request_id>", methods=["DELETE"], endpoint="delete_request")
    @admin_required
    def delete_request(request_id: int):
        container.store.delete_request(request_id)
        return jsonify({"ok": True})
