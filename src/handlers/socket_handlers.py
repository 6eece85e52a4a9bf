"""
Socket.IO event handlers for AmIaBot.

This module provides the main registration function and the connection and
disconnection handlers.
"""

import logging
import os
from flask import request
from flask_socketio import emit

from container import get_container
from config_factory import get_config
from src.services.rate_limit_service import get_event_queue_manager
from .socket_event_router import setup_router
from .matchmaking_handler import MatchmakingHandler
from .chat_handler import ChatHandler
from .game_action_handler import GameActionHandler
from .game_info_handler import GameInfoHandler

logger = logging.getLogger(__name__)


def register_socket_handlers(socketio_instance):
    """Register all socket handlers with the SocketIO instance."""
    router = setup_router(socketio_instance)

    matchmaking_handler = MatchmakingHandler()
    chat_handler = ChatHandler()
    game_handler = GameActionHandler()
    info_handler = GameInfoHandler()

    # Connection lifecycle events bypass the router
    socketio_instance.on_event('connect', handle_connect)
    socketio_instance.on_event('disconnect', handle_disconnect)

    router.register_route('join-game', matchmaking_handler.handle_join_game)
    router.register_route('send-message', chat_handler.handle_send_message)
    router.register_route('typing', chat_handler.handle_typing)
    router.register_route('submit-guess', game_handler.handle_submit_guess)
    router.register_route('end-game-early', game_handler.handle_end_game_early)
    router.register_route('get-leaderboard', info_handler.handle_get_leaderboard)

    router.register_with_socketio()

    logger.info(f"Registered {len(router.get_registered_events())} socket event handlers")
    return router


def handle_connect(auth=None):
    """Handle client connection with optional Origin enforcement in production."""
    app_config = get_config()
    allowed_origins_env = os.environ.get('SOCKETIO_CORS_ALLOWED_ORIGINS', '')

    origin = request.headers.get('Origin')
    if app_config.is_production and allowed_origins_env:
        allowed = {o.strip() for o in allowed_origins_env.split(',') if o.strip()}
        if origin and origin not in allowed:
            logger.warning(f'Rejecting connection from disallowed Origin: {origin}')
            return False

    logger.info(f'Client connected: {request.sid} from Origin: {origin}')
    emit('connected', {'status': 'Connected to AmIaBot server'})


def handle_disconnect(reason=None):
    """
    Handle client disconnection.

    Leaves the matchmaking queue, abandons any active session (the outcome
    stays unset and nobody is scored), tells a human opponent, and forgets
    the connection's identity.
    """
    container = get_container()
    matchmaker = container.get('Matchmaker')
    game_manager = container.get('GameManager')
    broadcast_service = container.get('BroadcastService')
    identity_registry = container.get('IdentityRegistry')
    sid = request.sid

    logger.info(f'Client disconnected: {sid}')

    matchmaker.dequeue(sid)

    session = game_manager.abandon_session_for(sid)
    if session is not None:
        logger.info(f'Session {session.id} abandoned by {sid}')
        opponent = session.opponent_of(sid)
        if opponent is not None and not opponent.is_bot:
            broadcast_service.send_opponent_disconnected(opponent.connection_id)

    identity_registry.remove(sid)

    event_queue_manager = get_event_queue_manager()
    if event_queue_manager is not None:
        event_queue_manager.forget_client(sid)
