from __future__ import annotations

from flask import Flask, jsonify

from ..common.guards import make_guards, payload
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .model import Account


def account_view(account: Account) -> dict:
    return {
        "id": account.account_id,
        "firstName": account.first_name,
        "lastName": account.last_name,
        "email": account.email,
        "role": account.role.value,
        "verified": account.verified,
    }


def _role(value) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError("Invalid account role")


def register(app: Flask, container) -> None:
    _, admin_required = make_guards(container)

    @app.route("/api/accounts", methods=["GET"], endpoint="list_accounts")
    @admin_required
    def list_accounts():
        return jsonify([account_view(a) for a in container.store.accounts()])

    @app.route("/api/accounts", methods=["POST"], endpoint="add_account")
    @admin_required
    def add_account():
        data = payload()
        account = container.store.create_account(
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=_role(data.get("role", Role.USER.value)),
            verified=bool(data.get("verified", False)),
        )
        return jsonify(account_view(account)), 201

    @app.route("/api/accounts/<path:email>", methods=["PUT"], endpoint="edit_account")
    @admin_required
    def edit_account(email: str):
        data = payload()
        patch = {
            "first_name": data.get("firstName"),
            "last_name": data.get("lastName"),
            "email": data.get("email"),
            "password": data.get("password") or None,
            "role": _role(data["role"]) if "role" in data else None,
            "verified": data.get("verified"),
        }
        account = container.auth_gate.update_account(
            email, **{k: v for k, v in patch.items() if v is not None}
        )
        return jsonify(account_view(account))

    @app.route("/api/accounts/<path:email>", methods=["DELETE"], endpoint="delete_account")
    @admin_required
    def delete_account(email: str):
        container.auth_gate.delete_account(email)
        return jsonify({"ok": True})
