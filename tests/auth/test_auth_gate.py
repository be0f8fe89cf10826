from __future__ import annotations

import asyncio

import pytest

from employee_portal.core.enums import Role
from employee_portal.core.exceptions import (
    AccountNotFoundError,
    AuthorizationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NoPendingVerificationError,
    SelfDeleteError,
    SelfLockoutError,
    ValidationError,
    VerificationInProgressError,
    WeakPasswordError,
)


@pytest.fixture
def gate(container):
    return container.auth_gate


@pytest.fixture
def store(container):
    return container.store


def _login_admin(gate):
    return gate.login("admin@example.com", "admin123")


def test_register_verify_login_scenario(gate, store):
    acc = gate.register("Jo", "Lee", "jo@x.com", "secret1")
    assert acc.verified is False and acc.role == Role.USER
    assert store.pending_verification_email() == "jo@x.com"

    with pytest.raises(InvalidCredentialsError):
        gate.login("jo@x.com", "secret1")

    verified = asyncio.run(gate.simulate_verify())
    assert verified.verified is True
    assert store.pending_verification_email() is None

    logged_in = gate.login(" JO@x.com ", "secret1")
    assert logged_in.email == "jo@x.com"
    assert gate.current_account() == logged_in


def test_register_rejects_short_password(gate, store):
    with pytest.raises(WeakPasswordError):
        gate.register("Jo", "Lee", "jo@x.com", "12345")
    assert store.find_account("jo@x.com") is None


def test_register_requires_names(gate):
    with pytest.raises(ValidationError):
        gate.register("  ", "Lee", "jo@x.com", "secret1")


def test_register_duplicate_email(gate):
    gate.register("Jo", "Lee", "jo@x.com", "secret1")
    with pytest.raises(DuplicateEmailError):
        gate.register("Other", "Person", "JO@X.COM", "secret2")


def test_second_registration_overwrites_pending_slot(gate, store):
    gate.register("Jo", "Lee", "jo@x.com", "secret1")
    gate.register("Al", "Kim", "al@x.com", "secret2")
    assert store.pending_verification_email() == "al@x.com"

    asyncio.run(gate.simulate_verify())
    assert store.find_account("al@x.com").verified is True
    assert store.find_account("jo@x.com").verified is False


def test_verify_without_pending(gate):
    with pytest.raises(NoPendingVerificationError):
        asyncio.run(gate.simulate_verify())


def test_verify_after_account_deleted(gate, store):
    gate.register("Jo", "Lee", "jo@x.com", "secret1")
    store.set_pending_verification("jo@x.com")
    store.db.accounts = [a for a in store.db.accounts if a.email != "jo@x.com"]
    with pytest.raises(AccountNotFoundError):
        asyncio.run(gate.simulate_verify())


def test_verify_is_not_reentrant(gate):
    gate.register("Jo", "Lee", "jo@x.com", "secret1")

    async def run_twice():
        first = asyncio.create_task(gate.simulate_verify())
        await asyncio.sleep(0)
        with pytest.raises(VerificationInProgressError):
            await gate.simulate_verify()
        return await first

    assert asyncio.run(run_twice()).verified is True


def test_login_wrong_password(gate):
    with pytest.raises(InvalidCredentialsError):
        gate.login("admin@example.com", "nope")


def test_logout_clears_session(gate):
    _login_admin(gate)
    gate.logout()
    assert gate.current_account() is None


def test_admin_cannot_delete_self(gate, store):
    _login_admin(gate)
    with pytest.raises(SelfDeleteError):
        gate.delete_account("ADMIN@example.com")
    assert store.find_account("admin@example.com") is not None


def test_admin_can_delete_other_account(gate, store):
    _login_admin(gate)
    gate.delete_account("manager@example.com")
    assert store.find_account("manager@example.com") is None


def test_admin_cannot_demote_or_rename_self(gate, store):
    _login_admin(gate)
    with pytest.raises(SelfLockoutError):
        gate.update_account("admin@example.com", role=Role.USER)
    with pytest.raises(SelfLockoutError):
        gate.update_account("admin@example.com", email="root@example.com")

    updated = gate.update_account("admin@example.com", first_name="Ada", email="ADMIN@example.com")
    assert updated.first_name == "Ada"
    assert gate.current_account().first_name == "Ada"


def test_admin_may_demote_someone_else(gate, store):
    _login_admin(gate)
    assert gate.update_account("manager@example.com", role=Role.USER).role == Role.USER


def test_account_commands_need_admin_session(gate):
    with pytest.raises(AuthorizationError):
        gate.delete_account("manager@example.com")

    gate.register("Jo", "Lee", "jo@x.com", "secret1")
    asyncio.run(gate.simulate_verify())
    gate.login("jo@x.com", "secret1")
    with pytest.raises(AuthorizationError):
        gate.update_account("manager@example.com", first_name="X")
