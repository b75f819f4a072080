"""
Asset lifecycle policy for song audio / image slots.

A slot reference is either absent (``None``), attached (a URL to a live
object) or pending-replace (a new file chosen but not yet uploaded). When a
song update commits:

- keep: the stored URL is written back untouched
- replace: the new object is uploaded and its URL obtained before the
  document is written; the superseded object is removed afterwards
- clear: the field becomes absent and the old object is removed

Removal of superseded or orphaned objects is best-effort. Failures are
recorded by ``AssetJanitor`` and logged, and never propagate to the caller.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from loguru import logger

from .assets import AssetSlot, AssetStore
from .exceptions import AssetCleanupError
from .models import AssetUpload, utcnow


class SlotAction(Enum):
    KEEP = "keep"
    REPLACE = "replace"
    CLEAR = "clear"


@dataclass(frozen=True)
class SlotChange:
    """What a song update does to one asset slot."""

    action: SlotAction
    upload: Optional[AssetUpload] = None

    @classmethod
    def keep(cls) -> "SlotChange":
        return cls(SlotAction.KEEP)

    @classmethod
    def replace(cls, upload: AssetUpload) -> "SlotChange":
        return cls(SlotAction.REPLACE, upload)

    @classmethod
    def clear(cls) -> "SlotChange":
        return cls(SlotAction.CLEAR)

    @classmethod
    def from_form(
        cls, upload: Optional[AssetUpload], remove: bool = False
    ) -> "SlotChange":
        """A supplied file wins over the remove flag; neither means keep."""
        if upload is not None:
            return cls.replace(upload)
        if remove:
            return cls.clear()
        return cls.keep()

    def __post_init__(self) -> None:
        if (self.action is SlotAction.REPLACE) != (self.upload is not None):
            raise ValueError("An upload is required for, and only for, replace")


@dataclass(frozen=True)
class CleanupAttempt:
    """One best-effort removal of an asset object."""

    url: str
    key: Optional[str]
    slot: Optional[AssetSlot]
    reason: str
    ok: bool
    error: Optional[AssetCleanupError] = None
    at: Optional[datetime] = None


class AssetJanitor:
    """Removes superseded or orphaned assets and keeps a log of every attempt."""

    def __init__(
        self,
        assets: AssetStore,
        clock: Callable[[], datetime] = utcnow,
        max_history: int = 500,
    ) -> None:
        self.assets = assets
        self._clock = clock
        self._max_history = max_history
        self._attempts: list[CleanupAttempt] = []
        self._lock = threading.Lock()

    @property
    def attempts(self) -> list[CleanupAttempt]:
        with self._lock:
            return list(self._attempts)

    @property
    def failures(self) -> list[CleanupAttempt]:
        return [a for a in self.attempts if not a.ok]

    def _record(self, attempt: CleanupAttempt) -> CleanupAttempt:
        with self._lock:
            self._attempts.append(attempt)
            if len(self._attempts) > self._max_history:
                del self._attempts[: len(self._attempts) - self._max_history]
        return attempt

    def discard(
        self, url: str, reason: str, slot: Optional[AssetSlot] = None
    ) -> CleanupAttempt:
        """Delete the object behind ``url``. Never raises."""
        key = self.assets.key_for_url(url)
        if key is None:
            error = AssetCleanupError(url, "URL is not owned by this asset store")
            logger.warning(f"Skipping asset cleanup ({reason}): {error}")
            return self._record(
                CleanupAttempt(url, None, slot, reason, False, error, self._clock())
            )

        try:
            self.assets.delete(key)
        except Exception as e:  # non-fatal for any backend failure
            error = AssetCleanupError(url, str(e))
            logger.warning(f"Asset cleanup failed ({reason}): {error}")
            return self._record(
                CleanupAttempt(url, key, slot, reason, False, error, self._clock())
            )

        logger.info(f"Removed asset {key} ({reason})")
        return self._record(
            CleanupAttempt(url, key, slot, reason, True, None, self._clock())
        )
