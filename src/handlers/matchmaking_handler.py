"""
Matchmaking Handler

This module handles the join-game Socket.IO event: identity registration and
handing the connection to the matchmaker.
"""

import logging

from src.core.errors import ErrorCode, ValidationError
from src.services.error_response_factory import with_error_handling
from src.services.rate_limit_service import prevent_event_overflow
from .base_handler import BaseHandler

logger = logging.getLogger(__name__)


class MatchmakingHandler(BaseHandler):
    """Handler for joining the matchmaking queue."""

    @prevent_event_overflow('join-game')
    @with_error_handling
    def handle_join_game(self, data=None):
        """
        Handle a request to find a game.

        Expected data format (username is optional):
        {
            'username': 'display name'
        }
        """
        self.log_handler_start('handle_join_game', data)

        data = self.validate_data_dict(data, allow_empty=True)
        username = self.validation_service.validate_username(data.get('username'))

        if self.game_manager.has_active_session(self.sid):
            raise ValidationError(
                ErrorCode.ALREADY_IN_GAME,
                'You are already in a game'
            )

        if self.matchmaker.is_waiting(self.sid):
            logger.info(f'{self.sid} is already waiting for a match')
            return

        user = self.identity_registry.register(self.sid, username)
        self.matchmaker.enqueue(self.sid)

        self.log_handler_success('handle_join_game', f'{user.display_name} is matchmaking')
