from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for authorization."""

    ADMIN = "admin"
    USER = "user"


class RequestType(str, Enum):
    EQUIPMENT = "Equipment"
    LEAVE = "Leave"


class RequestStatus(str, Enum):
    """Approval workflow state of an equipment/leave request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
