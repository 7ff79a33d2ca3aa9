from __future__ import annotations

from typing import Literal, Protocol

Permission = Literal["default", "granted", "denied"]


class Notifier(Protocol):
    """Completion alerts; the permission state belongs to the host."""

    @property
    def permission(self) -> Permission: ...

    def request_permission(self) -> None: ...

    def notify(self, title: str, body: str) -> None: ...


class NullNotifier:
    permission: Permission = "denied"

    def request_permission(self) -> None:
        return None

    def notify(self, title: str, body: str) -> None:
        return None
