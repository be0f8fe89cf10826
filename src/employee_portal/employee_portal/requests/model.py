from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..core.enums import RequestStatus, RequestType


@dataclass(frozen=True)
class RequestItem:
    name: str
    quantity: int = 1


@dataclass(frozen=True)
class Request:
    request_id: int
    employee_email: str
    request_type: RequestType
    items: Tuple[RequestItem, ...]
    leave_start: str
    leave_end: str
    leave_reason: str
    status: RequestStatus
    created_at: int

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING
