"""
Game Info Handler

This module handles Socket.IO events that only read game information.
"""

import logging

from src.services.error_response_factory import with_error_handling
from src.services.rate_limit_service import prevent_event_overflow
from .base_handler import BaseInfoHandler

logger = logging.getLogger(__name__)


class GameInfoHandler(BaseInfoHandler):
    """Handler for leaderboard requests."""

    @prevent_event_overflow('get-leaderboard')
    @with_error_handling
    def handle_get_leaderboard(self, data=None):
        """Send the full ranked leaderboard to the requester."""
        self.log_handler_start('handle_get_leaderboard', data)

        entries = self.leaderboard_service.top_k(self.game_settings.leaderboard_size)
        self.broadcast_service.send_leaderboard(self.sid, entries)

        self.log_handler_success('handle_get_leaderboard', f'{len(entries)} entries sent')
