from __future__ import annotations

import asyncio

from flask import Flask, jsonify

from ..accounts.controller import account_view
from ..common.guards import make_guards, payload
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required, _ = make_guards(container)

    @app.route("/api/auth/register", methods=["POST"], endpoint="register")
    def register_account():
        data = payload()
        account = container.auth_gate.register(
            data.get("firstName", ""),
            data.get("lastName", ""),
            data.get("email", ""),
            data.get("password", ""),
        )
        return jsonify({"account": account_view(account), "pendingVerification": account.email}), 201

    @app.route("/api/auth/verify", methods=["POST"], endpoint="verify")
    def verify():
        account = asyncio.run(container.auth_gate.simulate_verify())
        return jsonify({"account": account_view(account)})

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = payload()
        account = container.auth_gate.login(data.get("email", ""), data.get("password", ""))
        return jsonify({"account": account_view(account)})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        container.auth_gate.logout()
        return jsonify({"ok": True})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify({"account": account_view(container.auth_gate.current_account())})
