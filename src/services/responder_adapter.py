"""
Responder Adapter - One interface over human and bot opponents.

Handlers relay chat and typing through the adapter returned by
ResponderFactory.for_session() and never branch on whether the responder is a
person or a bot. The bot variant emulates human typing latency and asks the
completion service for text, falling back to canned replies on any failure.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import Optional

from src.config.game_settings import get_game_settings
from src.core.game_types import Role
from src.game_session import GameSession
from src.services.completion_service import CompletionServiceError

logger = logging.getLogger(__name__)


class PendingReply:
    """A scheduled bot reply. Canceling it before it runs also clears the typing indicator."""

    def __init__(self, handle, broadcast_service, detective_id: str):
        self.handle = handle
        self.name = handle.name
        self.broadcast_service = broadcast_service
        self.detective_id = detective_id

    @property
    def active(self) -> bool:
        return self.handle.active

    def cancel(self) -> None:
        was_pending = self.handle.active
        self.handle.cancel()
        if was_pending:
            self.broadcast_service.send_opponent_typing(self.detective_id, False)


class ResponderAdapter(ABC):
    """Relays a detective's conversation to whoever is responding."""

    def __init__(self, game_manager, broadcast_service):
        self.game_manager = game_manager
        self.broadcast_service = broadcast_service

    def start(self, session: GameSession) -> None:
        """Hook run once right after a session is created."""
        pass

    @abstractmethod
    def relay_message(self, session: GameSession, sender_id: str, text: str) -> bool:
        """
        Record a message in the transcript and deliver it.

        Returns:
            False if the session no longer accepts messages
        """

    @abstractmethod
    def relay_typing(self, session: GameSession, sender_id: str, typing: bool) -> None:
        """Pass a typing indicator on, where that makes sense."""


class HumanResponderAdapter(ResponderAdapter):
    """Forwards messages and typing indicators verbatim to the paired connection."""

    def relay_message(self, session: GameSession, sender_id: str, text: str) -> bool:
        role = session.role_of(sender_id)
        opponent = session.opponent_of(sender_id)
        if role is None or opponent is None:
            return False

        if self.game_manager.append_message(session, role, text) is None:
            return False

        self.broadcast_service.send_chat_message(opponent.connection_id, text)
        return True

    def relay_typing(self, session: GameSession, sender_id: str, typing: bool) -> None:
        opponent = session.opponent_of(sender_id)
        if opponent is None or opponent.is_bot:
            return
        self.broadcast_service.send_opponent_typing(opponent.connection_id, typing)


class BotResponderAdapter(ResponderAdapter):
    """Generates replies with simulated typing latency."""

    def __init__(self, game_manager, broadcast_service, timer_service, completion_service,
                 fallback_service, rng: Optional[random.Random] = None, settings=None):
        super().__init__(game_manager, broadcast_service)
        self.timer_service = timer_service
        self.completion_service = completion_service
        self.fallback_service = fallback_service
        self.rng = rng or random.Random()
        self.game_settings = settings or get_game_settings()

    def start(self, session: GameSession) -> None:
        """Schedule the bot's opening line."""
        handle = self.timer_service.schedule(
            self.game_settings.bot_greeting_delay_ms,
            self._deliver_greeting, session,
            name=f'greeting:{session.id}'
        )
        self.game_manager.attach_timer(session, handle)

    def relay_message(self, session: GameSession, sender_id: str, text: str) -> bool:
        if session.role_of(sender_id) != Role.DETECTIVE:
            return False

        if self.game_manager.append_message(session, Role.DETECTIVE, text) is None:
            return False

        self.broadcast_service.send_opponent_typing(sender_id, True)

        min_ms, max_ms = self.game_settings.bot_typing_delay_range_ms
        delay_ms = self.rng.randint(min_ms, max_ms)
        handle = self.timer_service.schedule(
            delay_ms, self._deliver_reply, session, text,
            name=f'bot-reply:{session.id}'
        )
        # Ending the session cancels this, which stops the typing indicator
        self.game_manager.attach_timer(session, PendingReply(handle, self.broadcast_service, sender_id))
        return True

    def relay_typing(self, session: GameSession, sender_id: str, typing: bool) -> None:
        # Nobody on the other side to see it
        return None

    def generate_text(self, session: GameSession, last_message: str = '', opening: bool = False) -> str:
        """
        Produce the next bot line.

        Uses the completion service with the session persona and full transcript,
        and the fallback generator when the service is unconfigured or fails.
        """
        if self.completion_service.is_configured() and session.persona is not None:
            transcript = self.game_manager.transcript_snapshot(session)
            try:
                return self.completion_service.complete(
                    session.persona.system_prompt, transcript, opening=opening)
            except CompletionServiceError as e:
                logger.warning(f"Falling back to canned reply for session {session.id}: {e}")

        return self.fallback_service.generate(last_message)

    def _deliver_reply(self, session: GameSession, last_message: str) -> None:
        detective_id = session.detective.connection_id
        try:
            text = self.generate_text(session, last_message)
            entry = self.game_manager.append_message(session, Role.RESPONDER, text)
        finally:
            self.broadcast_service.send_opponent_typing(detective_id, False)

        if entry is not None:
            self.broadcast_service.send_chat_message(detective_id, text)

    def _deliver_greeting(self, session: GameSession) -> None:
        if not session.is_active:
            return
        text = self.generate_text(session, opening=True)
        if self.game_manager.append_message(session, Role.RESPONDER, text) is not None:
            self.broadcast_service.send_chat_message(session.detective.connection_id, text)


class ResponderFactory:
    """Chooses the adapter variant for a session."""

    def __init__(self, human_adapter: HumanResponderAdapter, bot_adapter: BotResponderAdapter):
        self.human_adapter = human_adapter
        self.bot_adapter = bot_adapter

    def for_session(self, session: GameSession) -> ResponderAdapter:
        return self.bot_adapter if session.is_bot_opponent else self.human_adapter
