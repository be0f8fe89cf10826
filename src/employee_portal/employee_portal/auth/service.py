from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..accounts.model import Account
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import DEFAULT_VERIFY_DELAY_SECONDS, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import (
    AccountNotFoundError,
    AuthorizationError,
    InvalidCredentialsError,
    NoPendingVerificationError,
    SelfDeleteError,
    SelfLockoutError,
    VerificationInProgressError,
)
from ..session.manager import SessionManager
from ..store.normalizers import canonical_email
from ..store.store import Store

logger = logging.getLogger(__name__)


class AuthGate:
    """Use cases: register, verify, login, and the admin account commands that
    need to know who is calling."""

    def __init__(
        self,
        store: Store,
        sessions: SessionManager,
        *,
        verify_delay: float = DEFAULT_VERIFY_DELAY_SECONDS,
    ):
        self._store = store
        self._sessions = sessions
        self._verify_delay = verify_delay
        self._verifying = False

    def register(self, first_name: str, last_name: str, email: str, password: str) -> Account:
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        email = require_non_empty(email, "Email")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        account = self._store.create_account(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password,
            role=Role.USER,
            verified=False,
        )
        # Single slot: a newer registration replaces the previous marker.
        self._store.set_pending_verification(account.email)
        logger.info("Registered %s (pending verification)", account.email)
        return account

    async def simulate_verify(self) -> Account:
        if self._verifying:
            raise VerificationInProgressError("Verification is already in progress")
        self._verifying = True
        try:
            await asyncio.sleep(self._verify_delay)

            email = self._store.pending_verification_email()
            if not email:
                raise NoPendingVerificationError("No account is waiting for verification")
            if not self._store.find_account(email):
                raise AccountNotFoundError(f"Account {email!r} no longer exists")

            account = self._store.update_account(email, verified=True)
            self._store.clear_pending_verification()
            logger.info("Verified %s", account.email)
            return account
        finally:
            self._verifying = False

    def login(self, email: str, password: str) -> Account:
        key = canonical_email(email)
        matches = [
            a
            for a in self._store.accounts()
            if a.email == key and a.password == password and a.verified
        ]
        if len(matches) != 1:
            raise InvalidCredentialsError("Invalid email or password, or email not verified")

        account = matches[0]
        self._sessions.set_session(account)
        logger.info("Login %s", account.email)
        return account

    def logout(self) -> None:
        self._sessions.clear_session()

    def current_account(self) -> Optional[Account]:
        return self._sessions.resolve_current_account()

    def _require_admin(self) -> Account:
        caller = self._sessions.resolve_current_account()
        if not caller or caller.role != Role.ADMIN:
            raise AuthorizationError("Admin access required")
        return caller

    def update_account(self, original_email: str, **patch) -> Account:
        caller = self._require_admin()
        if caller.email == canonical_email(original_email):
            new_email = patch.get("email")
            if new_email is not None and canonical_email(new_email) != caller.email:
                raise SelfLockoutError("You cannot change the email of the account you are logged in with")
            role = patch.get("role")
            if role is not None and role != Role.ADMIN:
                raise SelfLockoutError("You cannot remove your own admin role")

        account = self._store.update_account(original_email, **patch)
        if account.email == caller.email:
            self._sessions.set_session(account)
        return account

    def delete_account(self, email: str) -> None:
        caller = self._require_admin()
        if caller.email == canonical_email(email):
            raise SelfDeleteError("You cannot delete the account you are logged in with")
        self._store.delete_account(email)
