from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class Account:
    """Domain entity: Account.

    Note: `email` (canonical form) is the identity key; `account_id` is an opaque
    stable id kept for denormalized references.
    """

    account_id: int
    first_name: str
    last_name: str
    email: str
    password: str
    role: Role
    verified: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
