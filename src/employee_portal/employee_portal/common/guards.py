from __future__ import annotations

from functools import wraps

from flask import g, jsonify, request

from ..core.enums import Role


def make_guards(container):
    """Build `login_required` / `admin_required` decorators bound to a container."""

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            account = container.sessions.resolve_current_account()
            if not account:
                return jsonify({"error": "Please log in to continue"}), 401
            g.current_account = account
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            account = container.sessions.resolve_current_account()
            if not account:
                return jsonify({"error": "Please log in to continue"}), 401
            if account.role != Role.ADMIN:
                return jsonify({"error": "Admin access required"}), 403
            g.current_account = account
            return view(*args, **kwargs)

        return wrapper

    return login_required, admin_required


def payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
