"""
Email / password sign-in producing opaque session tokens.

Tokens live in process memory; restarting the service signs everybody out.
"""

import secrets
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from loguru import logger
from passlib.context import CryptContext

from .sessions import Session
from .users import User, UserStore, new_uid, normalize_email

# Password hashing with Argon2
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

MIN_PASSWORD_LENGTH = 8


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthError(Exception):
    """Raised when sign-in fails or an account operation is invalid."""

    pass


class AuthService:
    """Accounts plus the in-memory table of live sessions."""

    def __init__(
        self,
        users: UserStore,
        session_ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.users = users
        self.session_ttl = session_ttl
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create_user(self, email: str, password: str, is_admin: bool = False) -> User:
        """Register an account.

        Raises:
            AuthError: If the email is blank or the password too short
            DuplicateUserError: If the email is already registered
        """
        email = normalize_email(email)
        if not email or "@" not in email:
            raise AuthError("A valid email address is required")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        user = User(
            uid=new_uid(),
            email=email,
            password_hash=pwd_context.hash(password),
            is_admin=is_admin,
            created_at=self._clock().isoformat(),
        )
        self.users.add(user)
        logger.info(f"Created user {email} (admin={is_admin})")
        return user

    def set_admin(self, email: str, is_admin: bool = True) -> User:
        """Grant or revoke the admin flag. Live sessions pick it up on next sign-in.

        Raises:
            AuthError: If no user has this email
        """
        user = self.users.get_by_email(email)
        if user is None:
            raise AuthError(f"No user with email {normalize_email(email)}")
        self.users.set_admin(user.uid, is_admin)
        logger.info(f"Set admin={is_admin} for {user.email}")
        return self.users.get(user.uid) or user

    def list_users(self) -> list[User]:
        return self.users.list()

    def sign_in(self, email: str, password: str) -> Session:
        """Check credentials and open a session.

        Raises:
            AuthError: On unknown email or wrong password (same message for both)
        """
        user = self.users.get_by_email(email)
        if user is None or not pwd_context.verify(password or "", user.password_hash):
            logger.warning(f"Failed sign-in for {normalize_email(email)}")
            raise AuthError("Invalid email or password")

        if pwd_context.needs_update(user.password_hash):
            self.users.set_password_hash(user.uid, pwd_context.hash(password))

        session = Session(
            uid=user.uid,
            email=user.email,
            is_admin=user.is_admin,
            token=secrets.token_urlsafe(32),
            expires_at=self._clock() + self.session_ttl,
        )
        with self._lock:
            self._purge_expired()
            self._sessions[session.token] = session
        logger.info(f"Signed in {user.email}")
        return session

    def _purge_expired(self) -> None:
        # Caller holds self._lock
        now = self._clock()
        expired = [t for t, s in self._sessions.items() if s.is_expired(now)]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.debug(f"Purged {len(expired)} expired sessions")

    def get_session(self, token: Optional[str]) -> Optional[Session]:
        """Return the live session for a token; unknown or expired tokens give None."""
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.is_expired(self._clock()):
                del self._sessions[token]
                return None
            return session

    def sign_out(self, token: Optional[str]) -> bool:
        if not token:
            return False
        with self._lock:
            session = self._sessions.pop(token, None)
        if session:
            logger.info(f"Signed out {session.email}")
        return session is not None
