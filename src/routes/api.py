"""
REST API endpoints for the AmIaBot application.
"""

import logging
from flask import Blueprint, jsonify, request

from src.core.errors import ErrorCode
from src.services.completion_service import CompletionServiceError

logger = logging.getLogger(__name__)


def create_api_blueprint(container):
    """
    Create and configure the API Blueprint.

    Services are resolved from the container per request, so the blueprint
    follows the container when it is reconfigured.
    """
    api = Blueprint('api', __name__)

    def error_response(code: ErrorCode, message: str, status: int):
        factory = container.get('ErrorResponseFactory')
        return jsonify(factory.create_error_response(code, message)), status

    @api.route('/api/health')
    def health():
        """Liveness check with the number of running games."""
        return jsonify({
            'status': 'healthy',
            'activeGames': container.get('GameManager').active_session_count()
        })

    @api.route('/api/leaderboard')
    def leaderboard():
        settings = container.get('GameSettings')
        return jsonify(container.get('LeaderboardService').top_k(settings.api_leaderboard_size))

    @api.route('/api/stats')
    def stats():
        """Process-wide counters."""
        return jsonify({
            'totalGames': container.get('IdentityRegistry').scored_user_count(),
            'activeGames': container.get('GameManager').active_session_count(),
            'waitingPlayers': container.get('Matchmaker').waiting_count()
        })

    @api.route('/api/chat', methods=['POST'])
    def chat():
        """
        Single-player chat with the completion service.

        Expected body:
        {
            'message': 'text',
            'conversationHistory': [{'sender': 'user' | 'bot', 'text': '...'}]
        }
        """
        body = request.get_json(silent=True) or {}
        message = body.get('message') if isinstance(body, dict) else None
        if not message or not isinstance(message, str):
            return error_response(ErrorCode.MISSING_DATA, 'Message is required', 400)

        history = body.get('conversationHistory') or []
        if not isinstance(history, list):
            history = []

        completion_service = container.get('CompletionService')
        if not completion_service.is_configured():
            logger.error('Chat requested but no completion API key is configured')
            return error_response(ErrorCode.SERVICE_UNAVAILABLE, 'AI service not configured', 503)

        try:
            reply = completion_service.chat(message, history)
        except CompletionServiceError as e:
            logger.error(f'Chat completion failed: {e}')
            return error_response(ErrorCode.UPSTREAM_ERROR, 'Failed to generate AI response', 500)

        return jsonify({'response': reply})

    return api
