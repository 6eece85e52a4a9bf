"""
Game Session for AmIaBot

One timed round between a detective and a responder: the transcript, the
timers that belong to the round, and end-of-game adjudication.
"""

import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.core.game_types import Guess, Outcome, Role, SessionStatus

logger = logging.getLogger(__name__)

BOT_DISPLAY_NAME = 'AI_Bot'


def new_session_id() -> str:
    """Unguessable session identifier (128 bits, hex encoded)."""
    return secrets.token_hex(16)


@dataclass
class Participant:
    """One side of a session: a connected user or a synthetic bot."""
    connection_id: str
    display_name: str
    is_bot: bool = False

    @classmethod
    def bot_for(cls, session_id: str) -> 'Participant':
        return cls(connection_id=f'ai_{session_id}', display_name=BOT_DISPLAY_NAME, is_bot=True)


@dataclass
class TranscriptEntry:
    speaker_role: Role
    text: str
    timestamp: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'speaker_role': self.speaker_role.value,
            'text': self.text,
            'timestamp': self.timestamp
        }


@dataclass
class GameSession:
    """State machine for one game. ACTIVE -> ENDED exactly once."""

    id: str
    detective: Participant
    responder: Participant
    is_bot_opponent: bool
    duration_ms: int = 180000
    persona: Optional[Any] = None
    started_at: float = field(default_factory=time.time)
    ended_at: Optional[float] = None
    status: SessionStatus = SessionStatus.ACTIVE
    guess: Optional[Guess] = None
    outcome: Outcome = Outcome.UNSET
    transcript: List[TranscriptEntry] = field(default_factory=list)
    _timers: List[Any] = field(default_factory=list, repr=False)

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    def role_of(self, connection_id: str) -> Optional[Role]:
        """Get the role a connection plays in this session, or None."""
        if self.detective.connection_id == connection_id:
            return Role.DETECTIVE
        if self.responder.connection_id == connection_id:
            return Role.RESPONDER
        return None

    def opponent_of(self, connection_id: str) -> Optional[Participant]:
        role = self.role_of(connection_id)
        if role == Role.DETECTIVE:
            return self.responder
        if role == Role.RESPONDER:
            return self.detective
        return None

    def human_participants(self) -> List[Participant]:
        return [p for p in (self.detective, self.responder) if not p.is_bot]

    def add_message(self, speaker_role: Role, text: str) -> Optional[TranscriptEntry]:
        """
        Append a message to the transcript.

        Args:
            speaker_role: Who is speaking
            text: Message text

        Returns:
            The new entry, or None if the session has ended
        """
        if not self.is_active:
            logger.debug(f"Rejected message for ended session {self.id}")
            return None

        timestamp = time.time()
        if self.transcript and timestamp < self.transcript[-1].timestamp:
            timestamp = self.transcript[-1].timestamp

        entry = TranscriptEntry(speaker_role=speaker_role, text=text, timestamp=timestamp)
        self.transcript.append(entry)
        return entry

    def end_game(self, guess: Guess) -> Outcome:
        """
        End the game with the detective's guess. The first call wins.

        Args:
            guess: The detective's guess

        Returns:
            The outcome; later calls return the already-computed outcome
        """
        if not self.is_active:
            return self.outcome

        self.status = SessionStatus.ENDED
        self.ended_at = time.time()
        self.guess = guess

        if self.is_bot_opponent and guess == Guess.BOT:
            self.outcome = Outcome.DETECTIVE_CORRECT
        elif not self.is_bot_opponent and guess == Guess.HUMAN:
            self.outcome = Outcome.DETECTIVE_CORRECT
        else:
            self.outcome = Outcome.DETECTIVE_INCORRECT

        logger.info(f"Session {self.id} ended with guess {guess.value}: {self.outcome.value}")
        return self.outcome

    def abandon(self) -> bool:
        """
        End the game without a guess, leaving the outcome unset.

        Returns:
            True if this call ended the session
        """
        if not self.is_active:
            return False

        self.status = SessionStatus.ENDED
        self.ended_at = time.time()
        logger.info(f"Session {self.id} abandoned")
        return True

    def attach_timer(self, handle) -> None:
        self._timers.append(handle)

    def cancel_timers(self) -> None:
        for handle in self._timers:
            handle.cancel()
        self._timers.clear()

    def time_remaining_ms(self) -> int:
        if not self.is_active:
            return 0
        elapsed = (time.time() - self.started_at) * 1000
        return max(0, int(self.duration_ms - elapsed))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'is_bot_opponent': self.is_bot_opponent,
            'status': self.status.value,
            'guess': self.guess.value if self.guess else None,
            'outcome': self.outcome.value,
            'started_at': self.started_at,
            'ended_at': self.ended_at,
            'duration_ms': self.duration_ms,
            'transcript': [entry.to_dict() for entry in self.transcript]
        }
