"""
Admin accounts: email / password users stored next to the catalog.
"""

import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional, Protocol

from mezmurhub.core.database import ConnectionFactory


@dataclass(frozen=True)
class User:
    uid: str
    email: str
    password_hash: str
    is_admin: bool = False
    created_at: Optional[str] = None


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def new_uid() -> str:
    return uuid.uuid4().hex


class UserStore(Protocol):
    def get_by_email(self, email: str) -> Optional[User]: ...

    def get(self, uid: str) -> Optional[User]: ...

    def add(self, user: User) -> None: ...

    def set_admin(self, uid: str, is_admin: bool) -> None: ...

    def set_password_hash(self, uid: str, password_hash: str) -> None: ...

    def list(self) -> list[User]: ...


class DuplicateUserError(ValueError):
    """Raised when an email is already registered."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"A user with email {email} already exists")


def _row_to_user(row) -> User:
    return User(
        uid=row["uid"],
        email=row["email"],
        password_hash=row["password_hash"],
        is_admin=bool(row["is_admin"]),
        created_at=row["created_at"],
    )


class SqlUserStore:
    """Users in the ``users`` table."""

    def __init__(self, connect: ConnectionFactory) -> None:
        self._connect = connect

    def get_by_email(self, email: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ?", (normalize_email(email),)
            ).fetchone()
        return _row_to_user(row) if row else None

    def get(self, uid: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE uid = ?", (uid,)).fetchone()
        return _row_to_user(row) if row else None

    def add(self, user: User) -> None:
        if self.get_by_email(user.email):
            raise DuplicateUserError(user.email)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO users (uid, email, password_hash, is_admin, created_at)
                VALUES (?, ?, ?, ?, ?)
            """,
                (
                    user.uid,
                    normalize_email(user.email),
                    user.password_hash,
                    int(user.is_admin),
                    user.created_at or datetime.now(timezone.utc).isoformat(),
                ),
            )
            conn.commit()

    def set_admin(self, uid: str, is_admin: bool) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE users SET is_admin = ? WHERE uid = ?", (int(is_admin), uid)
            )
            conn.commit()

    def set_password_hash(self, uid: str, password_hash: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE users SET password_hash = ? WHERE uid = ?", (password_hash, uid)
            )
            conn.commit()

    def list(self) -> list[User]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY email ASC").fetchall()
        return [_row_to_user(row) for row in rows]


class InMemoryUserStore:
    """Dictionary-backed user store for tests and the ``memory`` backend."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._lock = threading.Lock()

    def get_by_email(self, email: str) -> Optional[User]:
        email = normalize_email(email)
        with self._lock:
            return next((u for u in self._users.values() if u.email == email), None)

    def get(self, uid: str) -> Optional[User]:
        with self._lock:
            return self._users.get(uid)

    def add(self, user: User) -> None:
        if self.get_by_email(user.email):
            raise DuplicateUserError(user.email)
        with self._lock:
            self._users[user.uid] = replace(user, email=normalize_email(user.email))

    def set_admin(self, uid: str, is_admin: bool) -> None:
        with self._lock:
            if uid in self._users:
                self._users[uid] = replace(self._users[uid], is_admin=is_admin)

    def set_password_hash(self, uid: str, password_hash: str) -> None:
        with self._lock:
            if uid in self._users:
                self._users[uid] = replace(
                    self._users[uid], password_hash=password_hash
                )

    def list(self) -> list[User]:
        with self._lock:
            return sorted(self._users.values(), key=lambda u: u.email)
