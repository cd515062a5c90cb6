"""In-memory session state holding the current deal snapshot."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional, Tuple

from .models import Deal

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class SessionSnapshot:
    """A consistent view of the deals and the time they were uploaded."""

    deals: Tuple[Deal, ...] = ()
    uploaded_at: Optional[datetime] = None


class DealSession:
    """Holds the deal collection for one dashboard session.

    The collection is only ever replaced as a whole. Readers take a
    :class:`SessionSnapshot` and keep working on it even if a new upload
    lands in the meantime.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or datetime.now
        self._lock = threading.Lock()
        self._snapshot = SessionSnapshot()

    @property
    def deals(self) -> Tuple[Deal, ...]:
        return self._snapshot.deals

    @property
    def uploaded_at(self) -> Optional[datetime]:
        return self._snapshot.uploaded_at

    @property
    def is_loaded(self) -> bool:
        return self._snapshot.uploaded_at is not None

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._snapshot

    def replace_all(self, deals: Iterable[Deal]) -> SessionSnapshot:
        """Swap in a new collection and stamp the upload time."""

        snapshot = SessionSnapshot(deals=tuple(deals), uploaded_at=self._clock())
        with self._lock:
            self._snapshot = snapshot
        LOGGER.debug("Session now holds %s deals (uploaded %s)", len(snapshot.deals), snapshot.uploaded_at)
        return snapshot

    def clear(self) -> None:
        with self._lock:
            self._snapshot = SessionSnapshot()
        LOGGER.debug("Session cleared")


__all__ = ["Clock", "DealSession", "SessionSnapshot"]
