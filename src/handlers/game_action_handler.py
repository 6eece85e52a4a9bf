"""
Game Action Handler

This module handles Socket.IO events that end a game: submitting the
detective's guess and asking to skip straight to the guess.
"""

import logging

from src.services.error_response_factory import with_error_handling
from src.services.rate_limit_service import prevent_event_overflow
from .base_handler import BaseGameHandler

logger = logging.getLogger(__name__)


class GameActionHandler(BaseGameHandler):
    """Handler for guess submission and early game end."""

    @prevent_event_overflow('submit-guess')
    @with_error_handling
    def handle_submit_guess(self, data):
        """
        Handle the detective's guess.

        Expected data format:
        {
            'guess': 'human' | 'bot'
        }
        """
        self.log_handler_start('handle_submit_guess', data)

        data = self.validate_data_dict(data)
        guess = self.validation_service.validate_guess(data)

        session = self.require_detective_session()
        if session is None:
            logger.debug(f'Ignoring guess from {self.sid}: no active game')
            return

        outcome = self.game_manager.submit_guess(session, guess)
        if outcome is None:
            # Another path ended the session first
            return

        detective_result, responder_result = self.scoring_service.score_session(session)

        self.broadcast_service.send_game_result(session.detective.connection_id, detective_result)
        if responder_result is not None:
            self.broadcast_service.send_game_result(session.responder.connection_id, responder_result)

        top_entries = self.leaderboard_service.top_k(self.game_settings.leaderboard_broadcast_size)
        self.broadcast_service.broadcast_leaderboard_update(top_entries)

        self.log_handler_success(
            'handle_submit_guess',
            f'Session {session.id} ended with {outcome.value}'
        )

    @prevent_event_overflow('end-game-early')
    @with_error_handling
    def handle_end_game_early(self, data=None):
        """Handle a request to move on to the guess before time is up."""
        self.log_handler_start('handle_end_game_early', data)

        if self.game_manager.request_early_end(self.sid):
            self.log_handler_success('handle_end_game_early')
