"""
Rate limiting service for preventing event floods from a single client.
"""

import os
import sys
import time
import threading
import logging
from collections import defaultdict, deque
from functools import wraps
from flask import request
from flask_socketio import emit

from src.core.errors import ErrorCode

logger = logging.getLogger(__name__)


class EventQueueManager:
    """Tracks per-client event rates and temporarily blocks flooding clients."""

    def __init__(self, max_events_per_second: int = 10, max_events_per_minute: int = 100,
                 block_duration: int = 60, global_max_events_per_second: int = 100):
        self.client_rates = defaultdict(lambda: deque(maxlen=max(max_events_per_minute, 1) + 1))
        self.global_event_window = deque(maxlen=1000)
        self.blocked_clients = {}
        self.lock = threading.RLock()

        self.max_events_per_second = max_events_per_second
        self.max_events_per_minute = max_events_per_minute
        self.global_max_events_per_second = global_max_events_per_second
        self.block_duration = block_duration

    def _is_testing(self):
        """Check if we're in a testing environment at runtime"""
        return os.environ.get('TESTING') == '1' or 'pytest' in sys.modules

    def is_client_blocked(self, client_id: str) -> bool:
        """Check if a client is currently blocked."""
        with self.lock:
            if client_id in self.blocked_clients:
                if time.time() - self.blocked_clients[client_id] > self.block_duration:
                    del self.blocked_clients[client_id]
                    logger.info(f"Unblocked client {client_id}")
                    return False
                return True
            return False

    def block_client(self, client_id: str, reason: str = "Rate limit exceeded"):
        with self.lock:
            self.blocked_clients[client_id] = time.time()
            logger.warning(f"Blocked client {client_id}: {reason}")

    def can_process_event(self, client_id: str, event_type: str) -> bool:
        """Check if an event from a client is within the rate limits."""
        if self._is_testing():
            return True
        return self.check_rate(client_id, event_type, time.time())

    def check_rate(self, client_id: str, event_type: str, current_time: float) -> bool:
        with self.lock:
            if self.is_client_blocked(client_id):
                return False

            self.global_event_window.append(current_time)
            recent_global_events = sum(1 for t in self.global_event_window
                                       if current_time - t <= 1)
            if recent_global_events > self.global_max_events_per_second:
                logger.warning(f"Global rate limit exceeded: {recent_global_events} events/sec")
                return False

            client_events = self.client_rates[client_id]
            client_events.append(current_time)

            recent_events = sum(1 for t in client_events if current_time - t <= 1)
            if recent_events > self.max_events_per_second:
                self.block_client(client_id, f"Too many {event_type} events per second: {recent_events}")
                return False

            minute_events = sum(1 for t in client_events if current_time - t <= 60)
            if minute_events > self.max_events_per_minute:
                self.block_client(client_id, f"Too many {event_type} events per minute: {minute_events}")
                return False

            return True

    def forget_client(self, client_id: str) -> None:
        """Drop rate history for a disconnected client. Blocks stay in force."""
        with self.lock:
            self.client_rates.pop(client_id, None)


# Global instance - will be set by app.py
_event_queue_manager = None


def set_event_queue_manager(manager):
    """Set the global event queue manager instance."""
    global _event_queue_manager
    _event_queue_manager = manager


def get_event_queue_manager():
    return _event_queue_manager


def prevent_event_overflow(event_type: str = "generic"):
    """Decorator to reject events from clients over their rate limit."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if _event_queue_manager is None:
                raise RuntimeError("Event queue manager not initialized. Call set_event_queue_manager() first.")

            client_id = request.sid

            if not _event_queue_manager.can_process_event(client_id, event_type):
                logger.warning(f"Event {event_type} blocked for client {client_id}")
                emit('error', {
                    'success': False,
                    'error': {
                        'code': ErrorCode.RATE_LIMITED.value,
                        'message': 'Too many requests. Please slow down.',
                        'details': {'retry_after': _event_queue_manager.block_duration}
                    }
                })
                return

            return func(*args, **kwargs)

        return wrapper
    return decorator


def create_event_queue_manager(max_events_per_second: int = 10, max_events_per_minute: int = 100,
                               rate_limit_block_seconds: int = 60) -> EventQueueManager:
    """Build an EventQueueManager from configuration values."""
    return EventQueueManager(
        max_events_per_second=max_events_per_second,
        max_events_per_minute=max_events_per_minute,
        block_duration=rate_limit_block_seconds
    )
