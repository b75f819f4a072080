"""Authentication domain - admin accounts and sign-in sessions.

The catalog never checks permissions itself; a ``Session`` is handed to
each repository so changes can be attributed to whoever made them.
"""

from .sessions import Session
from .service import AuthError, AuthService, pwd_context
from .users import (
    DuplicateUserError,
    InMemoryUserStore,
    SqlUserStore,
    User,
    UserStore,
)

__all__ = [
    "Session",
    "AuthError",
    "AuthService",
    "pwd_context",
    "DuplicateUserError",
    "InMemoryUserStore",
    "SqlUserStore",
    "User",
    "UserStore",
]
