"""
Broadcast Service - Centralized Socket.IO message emission.

This service handles all server-initiated Socket.IO emissions:
- Per-connection notifications (matching, game start, chat relay, timers)
- Game results
- Process-wide leaderboard broadcasts
"""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class BroadcastService:
    """Centralized service for all Socket.IO broadcasting operations."""

    def __init__(self, socketio):
        """Initialize the broadcast service.

        Args:
            socketio: Flask-SocketIO instance for emitting messages
        """
        self.socketio = socketio

    # Core emission methods

    def emit_to_player(self, event: str, data: Optional[Any], socket_id: str):
        """Emit an event to a specific connection."""
        try:
            if data is None:
                self.socketio.emit(event, to=socket_id)
            else:
                self.socketio.emit(event, data, to=socket_id)
            logger.debug(f'Emitted {event} to player {socket_id}')
        except Exception as e:
            logger.error(f'Error emitting {event} to player {socket_id}: {e}')

    def emit_to_all(self, event: str, data: Any):
        """Emit an event to every connected client."""
        try:
            self.socketio.emit(event, data)
            logger.debug(f'Emitted {event} to all clients')
        except Exception as e:
            logger.error(f'Error emitting {event} to all clients: {e}')

    def emit_error_to_player(self, error_response: Dict[str, Any], socket_id: str):
        """Emit an error message to a specific connection."""
        self.emit_to_player('error', error_response, socket_id)

    # Matchmaking notifications

    def send_matching_started(self, socket_id: str):
        self.emit_to_player('matching-started', None, socket_id)

    def send_game_started(self, socket_id: str, role: str, opponent_kind: str, game_id: str):
        """Tell one side a game has started, with its role and opponent hint."""
        self.emit_to_player('game-started', {
            'role': role,
            'opponentKind': opponent_kind,
            'gameId': game_id
        }, socket_id)

    # Chat relay

    def send_chat_message(self, socket_id: str, text: str):
        self.emit_to_player('receive-message', {
            'text': text,
            'sender': 'opponent'
        }, socket_id)

    def send_opponent_typing(self, socket_id: str, typing: bool):
        self.emit_to_player('opponent-typing', {'typing': typing}, socket_id)

    # Session lifecycle

    def send_time_up(self, socket_id: str):
        self.emit_to_player('time-up', None, socket_id)

    def send_proceed_to_guess(self, socket_id: str):
        self.emit_to_player('proceed-to-guess', None, socket_id)

    def send_opponent_disconnected(self, socket_id: str):
        self.emit_to_player('opponent-disconnected', None, socket_id)

    def send_game_result(self, socket_id: str, result: Dict[str, Any]):
        self.emit_to_player('game-result', result, socket_id)

    # Leaderboard

    def broadcast_leaderboard_update(self, entries: List[Dict[str, Any]]):
        """Broadcast the top of the leaderboard to every client."""
        self.emit_to_all('leaderboard-updated', entries)

    def send_leaderboard(self, socket_id: str, entries: List[Dict[str, Any]]):
        self.emit_to_player('leaderboard-data', entries, socket_id)
