# src/task_planner/users.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class UserRole(StrEnum):
    ADMIN = "admin"
    USER = "user"


@dataclass(slots=True, frozen=True)
class User:
    id: str
    username: str
    display_name: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


USERS: tuple[User, ...] = (
    User("1", "admin", "Admin", UserRole.ADMIN),
    User("2", "hia", "HİA", UserRole.USER),
    User("3", "yce", "YCE", UserRole.USER),
    User("4", "re", "RE", UserRole.USER),
    User("5", "kns", "KNS", UserRole.USER),
    User("6", "yy", "YY", UserRole.USER),
    User("7", "mg", "MG", UserRole.USER),
    User("8", "dt", "DT", UserRole.USER),
)


class UserDirectory:
    """Static user list with name-only login (no passwords)."""

    def __init__(self, users: tuple[User, ...] = USERS) -> None:
        self._by_username = {u.username: u for u in users}

    def all(self) -> list[User]:
        return list(self._by_username.values())

    def login(self, username: str) -> User | None:
        return self._by_username.get((username or "").strip().lower())

    def resolve(self, name: str) -> User | None:
        """Match a username (any case) or an exact display name such as "HİA"."""
        name = (name or "").strip()
        user = self._by_username.get(name.lower())
        if user is not None:
            return user
        return next((u for u in self._by_username.values() if u.display_name == name), None)
