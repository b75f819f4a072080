"""Session identity passed explicitly to every repository."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Session:
    """Who is acting. Repositories only use it to attribute changes."""

    uid: str
    email: str
    is_admin: bool = False
    token: Optional[str] = None
    expires_at: Optional[datetime] = None

    @property
    def actor(self) -> str:
        return self.email

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at

    @classmethod
    def system(cls) -> "Session":
        """Identity for CLI maintenance and tests, with no sign-in behind it."""
        return cls(uid="system", email="system", is_admin=True)
