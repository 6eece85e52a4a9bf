"""
Concurrency Control Service for AmIaBot

Handles per-session locking so that inbound events and timer callbacks never
interleave mutations of the same game session.
"""

import logging
import threading
from contextlib import contextmanager, nullcontext
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class ConcurrencyControlService:
    """Manages per-session exclusive locks."""

    def __init__(self):
        # Per-session locks for fine-grained control
        self._session_locks: Dict[str, threading.RLock] = {}
        # Lock for managing session locks themselves
        self._locks_lock = threading.Lock()

    def get_session_lock(self, session_id: str) -> threading.RLock:
        """Get or create a lock for a specific session."""
        with self._locks_lock:
            if session_id not in self._session_locks:
                self._session_locks[session_id] = threading.RLock()
            return self._session_locks[session_id]

    def find_session_lock(self, session_id: str) -> Optional[threading.RLock]:
        """Get the lock of a specific session without creating one."""
        with self._locks_lock:
            return self._session_locks.get(session_id)

    def cleanup_session_lock(self, session_id: str):
        """Clean up lock for a finished session."""
        with self._locks_lock:
            if session_id in self._session_locks:
                del self._session_locks[session_id]

    @contextmanager
    def session_operation(self, session_id: str):
        """
        Context manager for thread-safe session operations.

        Only sessions whose lock was created with get_session_lock are locked.
        A session whose lock has been cleaned up has ended and no longer
        changes, so late callers run unlocked instead of recreating the lock.
        """
        session_lock = self.find_session_lock(session_id)
        if session_lock is None:
            logger.debug(f"No lock for session {session_id}, running unlocked")
        with session_lock or nullcontext():
            yield

    def lock_count(self) -> int:
        with self._locks_lock:
            return len(self._session_locks)
