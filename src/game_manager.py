"""
Game Manager for AmIaBot

Owns the set of active game sessions: creation, lookup by connection,
transcript appends, guess adjudication, time-up and disconnect handling.
Every mutation of a session runs under that session's lock, so timer
callbacks and inbound events race safely and the first transition wins.
"""

import logging
import random
import threading
from typing import Dict, List, Optional

from src.config.game_settings import get_game_settings
from src.core.game_types import Guess, OpponentKind, Outcome, Role
from src.game_session import GameSession, Participant, TranscriptEntry, new_session_id

logger = logging.getLogger(__name__)


class GameManager:
    """Manages game session lifecycle."""

    def __init__(self, identity_registry, broadcast_service, timer_service, persona_manager,
                 concurrency_control, rng: Optional[random.Random] = None, settings=None):
        self.identity_registry = identity_registry
        self.broadcast_service = broadcast_service
        self.timer_service = timer_service
        self.persona_manager = persona_manager
        self.concurrency_control = concurrency_control
        self.rng = rng or random.Random()
        self.game_settings = settings or get_game_settings()

        self._sessions: Dict[str, GameSession] = {}
        # connection id -> session id, human participants only
        self._by_connection: Dict[str, str] = {}
        self._lock = threading.RLock()

    # Session creation

    def create_human_session(self, socket_a: str, socket_b: str) -> Optional[GameSession]:
        """
        Pair two connected users. Roles are assigned at random.

        Returns:
            The new session, or None if either side is no longer connected
        """
        user_a = self.identity_registry.get_user(socket_a)
        user_b = self.identity_registry.get_user(socket_b)
        if user_a is None or user_b is None:
            logger.warning(f"Cannot pair {socket_a} with {socket_b}: connection gone")
            return None

        if self.rng.random() < 0.5:
            detective_user, responder_user = user_a, user_b
        else:
            detective_user, responder_user = user_b, user_a

        session = GameSession(
            id=new_session_id(),
            detective=Participant(detective_user.id, detective_user.display_name),
            responder=Participant(responder_user.id, responder_user.display_name),
            is_bot_opponent=False,
            duration_ms=self.game_settings.game_duration_ms
        )
        self._register(session)

        self.broadcast_service.send_game_started(
            session.detective.connection_id, Role.DETECTIVE.value, OpponentKind.HUMAN.value, session.id)
        self.broadcast_service.send_game_started(
            session.responder.connection_id, Role.RESPONDER.value, OpponentKind.HUMAN.value, session.id)

        logger.info(f"Created human session {session.id}: "
                    f"{detective_user.display_name} (detective) vs {responder_user.display_name}")
        return session

    def create_bot_session(self, socket_id: str) -> Optional[GameSession]:
        """
        Pair a connected user with a bot. The user is always the detective and
        the persona is fixed for the whole session.

        Returns:
            The new session, or None if the connection is gone
        """
        user = self.identity_registry.get_user(socket_id)
        if user is None:
            logger.warning(f"Cannot create bot session for {socket_id}: connection gone")
            return None

        session_id = new_session_id()
        session = GameSession(
            id=session_id,
            detective=Participant(user.id, user.display_name),
            responder=Participant.bot_for(session_id),
            is_bot_opponent=True,
            duration_ms=self.game_settings.game_duration_ms,
            persona=self.persona_manager.get_random_persona()
        )
        self._register(session)

        self.broadcast_service.send_game_started(
            socket_id, Role.DETECTIVE.value, OpponentKind.UNKNOWN.value, session.id)

        logger.info(f"Created bot session {session.id} for {user.display_name} "
                    f"with persona {session.persona.id}")
        return session

    def _register(self, session: GameSession) -> None:
        self.concurrency_control.get_session_lock(session.id)
        with self._lock:
            self._sessions[session.id] = session
            for participant in session.human_participants():
                self._by_connection[participant.connection_id] = session.id

        handle = self.timer_service.schedule(
            session.duration_ms, self._on_time_up, session.id, name=f'time-up:{session.id}')
        session.attach_timer(handle)

    def _retire(self, session: GameSession) -> None:
        with self._lock:
            self._sessions.pop(session.id, None)
            for participant in session.human_participants():
                if self._by_connection.get(participant.connection_id) == session.id:
                    del self._by_connection[participant.connection_id]
        self.concurrency_control.cleanup_session_lock(session.id)

    # Lookup

    def get_session(self, session_id: str) -> Optional[GameSession]:
        return self._sessions.get(session_id)

    def find_session_by_connection(self, socket_id: str) -> Optional[GameSession]:
        """Get the active session a connection takes part in, or None."""
        with self._lock:
            session_id = self._by_connection.get(socket_id)
            if session_id is None:
                return None
            return self._sessions.get(session_id)

    def has_active_session(self, socket_id: str) -> bool:
        return self.find_session_by_connection(socket_id) is not None

    def active_session_count(self) -> int:
        return len(self._sessions)

    def get_active_sessions(self) -> List[GameSession]:
        with self._lock:
            return list(self._sessions.values())

    # Mutations

    def append_message(self, session: GameSession, speaker_role: Role, text: str) -> Optional[TranscriptEntry]:
        """Append to a session transcript under the session lock."""
        with self.concurrency_control.session_operation(session.id):
            return session.add_message(speaker_role, text)

    def submit_guess(self, session: GameSession, guess: Guess) -> Optional[Outcome]:
        """
        End a session with the detective's guess.

        Returns:
            The outcome if this call ended the session, None if it had already ended
        """
        with self.concurrency_control.session_operation(session.id):
            if not session.is_active:
                logger.debug(f"Guess for ended session {session.id} ignored")
                return None
            outcome = session.end_game(guess)
            session.cancel_timers()

        self._retire(session)
        return outcome

    def abandon_session_for(self, socket_id: str) -> Optional[GameSession]:
        """
        End the active session of a disconnecting connection, outcome unset.

        Returns:
            The abandoned session, or None if the connection had no active session
        """
        session = self.find_session_by_connection(socket_id)
        if session is None:
            return None

        with self.concurrency_control.session_operation(session.id):
            ended = session.abandon()
            if ended:
                session.cancel_timers()

        self._retire(session)
        return session if ended else None

    def request_early_end(self, socket_id: str) -> bool:
        """
        Ask to skip to the guess phase. Only signals the requester; the session
        stays active until a guess is submitted.
        """
        session = self.find_session_by_connection(socket_id)
        if session is None or not session.is_active:
            return False

        self.broadcast_service.send_proceed_to_guess(socket_id)
        return True

    def _on_time_up(self, session_id: str) -> None:
        session = self.get_session(session_id)
        if session is None:
            return

        with self.concurrency_control.session_operation(session_id):
            if not session.is_active:
                return
            recipients = [p.connection_id for p in session.human_participants()]

        logger.info(f"Time up for session {session_id}")
        for socket_id in recipients:
            self.broadcast_service.send_time_up(socket_id)

    def attach_timer(self, session: GameSession, handle) -> bool:
        """
        Make a timer part of a session so it is canceled when the session ends.

        Returns:
            False (and cancels the timer) if the session has already ended
        """
        with self.concurrency_control.session_operation(session.id):
            if not session.is_active:
                handle.cancel()
                return False
            session.attach_timer(handle)
            return True

    def transcript_snapshot(self, session: GameSession) -> List[TranscriptEntry]:
        with self.concurrency_control.session_operation(session.id):
            return list(session.transcript)

    def shutdown(self) -> None:
        """Cancel the timers of every active session."""
        for session in self.get_active_sessions():
            session.cancel_timers()
        logger.info("Game manager shut down")
