"""
Chat Handler

This module handles in-game chat traffic: messages and typing indicators.
Both are relayed through the session's responder adapter, so this handler
never needs to know whether the opponent is a person or a bot.
"""

import logging

from src.services.error_response_factory import with_error_handling
from src.services.rate_limit_service import prevent_event_overflow
from .base_handler import BaseHandler

logger = logging.getLogger(__name__)


class ChatHandler(BaseHandler):
    """Handler for chat messages and typing indicators."""

    @prevent_event_overflow('send-message')
    @with_error_handling
    def handle_send_message(self, data):
        """
        Handle a chat message from either side of a session.

        Expected data format:
        {
            'text': 'message text'
        }
        """
        self.log_handler_start('handle_send_message', data)

        data = self.validate_data_dict(data)
        text = self.validation_service.validate_message_text(data)

        session = self.get_current_session()
        if session is None:
            logger.debug(f'Dropping message from {self.sid}: no active game')
            return

        adapter = self.responder_factory.for_session(session)
        if not adapter.relay_message(session, self.sid, text):
            logger.debug(f'Message from {self.sid} not relayed in session {session.id}')

    @prevent_event_overflow('typing')
    @with_error_handling
    def handle_typing(self, data=None):
        """
        Handle a typing indicator.

        Expected data format:
        {
            'typing': true
        }
        """
        data = self.validate_data_dict(data, allow_empty=True)
        typing = self.validation_service.validate_typing(data)

        session = self.get_current_session()
        if session is None:
            return

        self.responder_factory.for_session(session).relay_typing(session, self.sid, typing)
