"""
Base Handler Classes

This module provides base classes for Socket.IO handlers with common patterns
for service access, identity lookup, validation and response formatting.
"""

import logging
from abc import ABC
from typing import Any, Dict, Optional
from flask import request
from flask_socketio import emit

from container import get_container
from src.core.errors import ErrorCode, ValidationError
from src.core.game_types import Role

logger = logging.getLogger(__name__)


class BaseHandler(ABC):
    """
    Abstract base class for all Socket.IO handlers.

    Services are looked up in the container on every access, so a handler
    created at startup keeps working after the container is reconfigured.
    """

    def __init__(self):
        self._container = get_container()

    @property
    def identity_registry(self):
        return self._container.get('IdentityRegistry')

    @property
    def matchmaker(self):
        return self._container.get('Matchmaker')

    @property
    def game_manager(self):
        return self._container.get('GameManager')

    @property
    def responder_factory(self):
        return self._container.get('ResponderFactory')

    @property
    def scoring_service(self):
        return self._container.get('ScoringService')

    @property
    def leaderboard_service(self):
        return self._container.get('LeaderboardService')

    @property
    def broadcast_service(self):
        return self._container.get('BroadcastService')

    @property
    def validation_service(self):
        return self._container.get('ValidationService')

    @property
    def error_response_factory(self):
        return self._container.get('ErrorResponseFactory')

    @property
    def game_settings(self):
        return self._container.get('GameSettings')

    @property
    def sid(self) -> str:
        """Connection id of the client that sent the current event."""
        return request.sid  # type: ignore[attr-defined]

    def require_user(self):
        """
        Get the registered user for the requesting client.

        Raises:
            ValidationError: If the client has not joined yet
        """
        user = self.identity_registry.get_user(self.sid)
        if user is None:
            raise ValidationError(
                ErrorCode.NOT_JOINED,
                'You must join a game first'
            )
        return user

    def get_current_session(self):
        """Get the active session of the requesting client, or None."""
        return self.game_manager.find_session_by_connection(self.sid)

    def validate_data_dict(self, data: Any, allow_empty: bool = False) -> Dict[str, Any]:
        return self.validation_service.validate_data_dict(data, allow_empty=allow_empty)

    def emit_success(self, event_name: str, data: Optional[Dict[str, Any]] = None) -> None:
        """Emit a success response to the requesting client."""
        response = self.error_response_factory.create_success_response(data or {})
        emit(event_name, response)

    def log_handler_start(self, handler_name: str, data: Any = None) -> None:
        """Log the start of handler execution."""
        logger.info(f'{handler_name} called by client: {self.sid}')
        if data:
            logger.debug(f'{handler_name} data: {data}')

    def log_handler_success(self, handler_name: str, message: Optional[str] = None) -> None:
        """Log successful handler completion."""
        log_msg = f'{handler_name} completed successfully for client: {self.sid}'
        if message:
            log_msg += f' - {message}'
        logger.info(log_msg)


class GameHandlerMixin:
    """
    Mixin for handlers that act on the requester's active session.
    """

    # Type hints for expected attributes from BaseHandler
    game_manager: Any
    sid: str

    def require_detective_session(self):
        """
        Get the requester's active session, checking they are its detective.

        Returns:
            The session, or None if the requester has no active session

        Raises:
            ValidationError: If the requester is the responder
        """
        session = self.game_manager.find_session_by_connection(self.sid)
        if session is None:
            return None

        if session.role_of(self.sid) != Role.DETECTIVE:
            raise ValidationError(
                ErrorCode.NOT_DETECTIVE,
                'Only the detective can submit a guess'
            )
        return session


class BaseGameHandler(BaseHandler, GameHandlerMixin):
    """Base class for handlers that deal with game operations."""
    pass


class BaseInfoHandler(BaseHandler):
    """Base class for handlers that provide information/status."""
    pass
