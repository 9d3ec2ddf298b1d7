"""Port for the external user/identity directory."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class UserDirectory(Protocol):
    def exists(self, user_id: str) -> bool: ...


class AcceptAllDirectory:
    """Directory used when no identity provider is wired in."""

    def exists(self, user_id: str) -> bool:
        return bool(user_id.strip())
