from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStorage(Protocol):
    """Interface for the local key/value storage the store persists into.

    Note (DIP): the store depends on this interface, mirroring the browser
    localStorage contract: string keys, string values, missing keys read as None.
    """

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError
