"""
In-process registry of live review sessions.

Sessions live only as long as the process; persisting snapshots is left to an
on_autosave hook supplied by the deployment. A session nobody has touched for
session_idle_ttl_seconds is cancelled and dropped the next time the registry
is used.
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional

from resume_review.config import get_settings
from resume_review.core.review_session import ReviewSession
from resume_review.core.schemas import ParseReviewData

logger = logging.getLogger(__name__)


class ReviewRegistry:
    def __init__(self, idle_ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self._sessions: Dict[str, ReviewSession] = {}
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()
        self._idle_ttl = idle_ttl
        self._clock = clock

    @property
    def idle_ttl(self) -> float:
        if self._idle_ttl is not None:
            return self._idle_ttl
        return get_settings().session_idle_ttl_seconds

    def create(self, review: ParseReviewData) -> ReviewSession:
        session = ReviewSession(review, settings=get_settings())
        session.open()
        with self._lock:
            self._evict_idle()
            self._sessions[review.id] = session
            self._last_seen[review.id] = self._clock()
        logger.info(f"Registered review {review.id} ({review.original_file_name or 'unnamed'})")
        return session

    def get(self, review_id: str) -> Optional[ReviewSession]:
        with self._lock:
            self._evict_idle()
            session = self._sessions.get(review_id)
            if session is not None:
                self._last_seen[review_id] = self._clock()
            return session

    def remove(self, review_id: str) -> Optional[ReviewSession]:
        with self._lock:
            self._last_seen.pop(review_id, None)
            return self._sessions.pop(review_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _evict_idle(self) -> None:
        cutoff = self._clock() - self.idle_ttl
        expired = [rid for rid, seen in self._last_seen.items() if seen < cutoff]
        for rid in expired:
            session = self._sessions.pop(rid)
            del self._last_seen[rid]
            session.cancel()
            logger.info(f"Evicted idle review {rid}")


_registry = ReviewRegistry()


def get_registry() -> ReviewRegistry:
    """FastAPI dependency; tests override it with a fresh registry."""
    return _registry
