from __future__ import annotations

import json
import logging
from typing import Optional

from ..accounts.model import Account
from ..core.constants import LEGACY_SESSION_KEY, SESSION_TOKEN_KEY
from ..storage.repository import KeyValueStorage
from ..store.normalizers import account_to_wire
from ..store.store import Store

logger = logging.getLogger(__name__)


class SessionManager:
    """Tracks the logged-in account in storage.

    Two forms are kept: the primary token (the account's canonical email) and
    the legacy record (a JSON copy of the whole account). Sessions never expire.
    """

    def __init__(self, store: Store, storage: KeyValueStorage):
        self._store = store
        self._storage = storage

    def _legacy_email(self) -> Optional[str]:
        text = self._storage.get_item(LEGACY_SESSION_KEY)
        if not text:
            return None
        try:
            record = json.loads(text)
        except ValueError:
            logger.warning("Ignoring unreadable legacy session record")
            return None
        if not isinstance(record, dict):
            return None
        email = record.get("email")
        return email if isinstance(email, str) else None

    def resolve_current_account(self) -> Optional[Account]:
        token = self._storage.get_item(SESSION_TOKEN_KEY)
        if token:
            account = self._store.find_account(token)
            if account:
                return account

        legacy_email = self._legacy_email()
        if legacy_email:
            return self._store.find_account(legacy_email)
        return None

    def set_session(self, account: Account) -> None:
        self._storage.set_item(SESSION_TOKEN_KEY, account.email)
        self._storage.set_item(LEGACY_SESSION_KEY, json.dumps(account_to_wire(account)))

    def clear_session(self) -> None:
        self._storage.remove_item(SESSION_TOKEN_KEY)
        self._storage.remove_item(LEGACY_SESSION_KEY)
