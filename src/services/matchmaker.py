"""
Matchmaker - Pairs waiting connections with humans or bots.

This service handles:
- The waiting queue (a connection appears in it at most once)
- Probability-governed human pairing when someone is already waiting
- Delayed bot pairing, so a bot match takes at least as long as a human one
- Cancelling the pending bot timer when a human pairing wins the race
"""

import logging
import random
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Optional

from src.config.game_settings import get_game_settings

logger = logging.getLogger(__name__)


@dataclass
class WaitingEntry:
    """A connection waiting for a match, with its pending bot-pairing timer."""
    socket_id: str
    enqueued_at: float
    timer: Any = None

    def cancel(self) -> None:
        if self.timer is not None:
            self.timer.cancel()


class Matchmaker:
    """Owns the waiting queue and turns waiting connections into sessions."""

    def __init__(self, identity_registry, game_manager, responder_factory, broadcast_service,
                 timer_service, rng: Optional[random.Random] = None, settings=None):
        self.identity_registry = identity_registry
        self.game_manager = game_manager
        self.responder_factory = responder_factory
        self.broadcast_service = broadcast_service
        self.timer_service = timer_service
        self.rng = rng or random.Random()
        self.game_settings = settings or get_game_settings()

        # Pairable connections, oldest first
        self._queue: 'OrderedDict[str, WaitingEntry]' = OrderedDict()
        # Connections already routed to a bot, waiting out the delay, oldest first
        self._bot_bound: 'OrderedDict[str, WaitingEntry]' = OrderedDict()
        self._lock = threading.RLock()

    def enqueue(self, socket_id: str) -> None:
        """
        Start matchmaking for a connection.

        If someone is waiting, pair with them with the configured probability;
        otherwise route to a bot after the minimum delay. Connections already
        routed to a bot are still candidates while their delay runs, after
        the pairable queue. With nobody waiting, the connection joins the
        queue and gets a bot once the delay elapses unless a human pairs with
        it first.
        """
        self.broadcast_service.send_matching_started(socket_id)

        while True:
            if not self.identity_registry.is_connected(socket_id):
                return

            with self._lock:
                if self.is_waiting(socket_id) or self.game_manager.has_active_session(socket_id):
                    logger.debug(f"Ignoring duplicate matchmaking request from {socket_id}")
                    return

                candidates = self._queue or self._bot_bound
                if not candidates:
                    self._queue[socket_id] = self._start_bot_countdown(socket_id)
                    logger.info(f"{socket_id} queued for matchmaking")
                    return

                if self.rng.random() >= self.game_settings.human_match_probability:
                    self._bot_bound[socket_id] = self._start_bot_countdown(socket_id)
                    logger.info(f"{socket_id} routed to a bot opponent")
                    return

                opponent_id, entry = candidates.popitem(last=False)
                entry.cancel()

            if not self.identity_registry.is_connected(opponent_id):
                logger.info(f"Discarding stale waiting entry {opponent_id}, retrying")
                continue

            session = self.game_manager.create_human_session(socket_id, opponent_id)
            if session is None:
                continue

            self.responder_factory.for_session(session).start(session)
            return

    def dequeue(self, socket_id: str) -> bool:
        """
        Stop matchmaking for a connection. Idempotent.

        Returns:
            True if the connection was waiting
        """
        with self._lock:
            entry = self._queue.pop(socket_id, None) or self._bot_bound.pop(socket_id, None)

        if entry is None:
            return False

        entry.cancel()
        logger.info(f"{socket_id} removed from matchmaking")
        return True

    def _start_bot_countdown(self, socket_id: str) -> WaitingEntry:
        entry = WaitingEntry(socket_id=socket_id, enqueued_at=time.time())
        entry.timer = self.timer_service.schedule(
            self.game_settings.bot_match_delay_ms,
            self._on_bot_delay_elapsed, socket_id, entry,
            name=f'bot-match:{socket_id}'
        )
        return entry

    def _on_bot_delay_elapsed(self, socket_id: str, entry: WaitingEntry) -> None:
        with self._lock:
            if self._queue.get(socket_id) is entry:
                del self._queue[socket_id]
            elif self._bot_bound.get(socket_id) is entry:
                del self._bot_bound[socket_id]
            else:
                # Matched with a human or dequeued in the meantime
                return

        if not self.identity_registry.is_connected(socket_id):
            return

        session = self.game_manager.create_bot_session(socket_id)
        if session is not None:
            self.responder_factory.for_session(session).start(session)

    def is_waiting(self, socket_id: str) -> bool:
        with self._lock:
            return socket_id in self._queue or socket_id in self._bot_bound

    def queue_length(self) -> int:
        """Number of connections in the pairable queue."""
        return len(self._queue)

    def waiting_count(self) -> int:
        """Number of connections not yet in a session, including bot-bound ones."""
        with self._lock:
            return len(self._queue) + len(self._bot_bound)

    def shutdown(self) -> None:
        """Cancel every pending bot-pairing timer and empty the queue."""
        with self._lock:
            entries = list(self._queue.values()) + list(self._bot_bound.values())
            self._queue.clear()
            self._bot_bound.clear()
        for entry in entries:
            entry.cancel()
