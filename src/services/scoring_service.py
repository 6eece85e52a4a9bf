"""
Scoring Service for AmIaBot

Turns an adjudicated session into score updates, leaderboard entries and the
result payloads sent to each human side.
"""

import logging
from typing import Dict, Optional, Tuple

from src.core.game_types import Outcome, Role
from src.game_session import GameSession

logger = logging.getLogger(__name__)


class ScoringService:
    """Applies session outcomes to user scores and the leaderboard."""

    def __init__(self, identity_registry, leaderboard_service):
        self.identity_registry = identity_registry
        self.leaderboard_service = leaderboard_service

    def is_win(self, session: GameSession, role: Role) -> bool:
        """
        Check if a session counts as a win for a role.

        The detective wins by guessing correctly; a human responder wins when
        the detective guesses wrong.
        """
        if role == Role.DETECTIVE:
            return session.outcome == Outcome.DETECTIVE_CORRECT
        return session.outcome == Outcome.DETECTIVE_INCORRECT

    def score_session(self, session: GameSession) -> Tuple[Dict, Optional[Dict]]:
        """
        Record an ended session for every human participant.

        Bot responders are never scored.

        Args:
            session: A session that ended with a guess

        Returns:
            Tuple of (detective result payload, responder result payload or None)
        """
        detective_id = session.detective.connection_id
        detective_won = self.is_win(session, Role.DETECTIVE)
        detective_score = self._record(session.detective.display_name, detective_id, detective_won)

        detective_result = {
            'correct': detective_won,
            'wasAI': session.is_bot_opponent,
            'guess': session.guess.value if session.guess else None,
            'score': detective_score
        }

        responder_result = None
        if not session.responder.is_bot:
            responder_won = self.is_win(session, Role.RESPONDER)
            responder_score = self._record(
                session.responder.display_name, session.responder.connection_id, responder_won)
            responder_result = {
                'correct': responder_won,
                'role': Role.RESPONDER.value,
                'detectiveGuess': session.guess.value if session.guess else None,
                'score': responder_score
            }

        logger.info(f"Scored session {session.id}: detective_won={detective_won}")
        return detective_result, responder_result

    def _record(self, username: str, socket_id: str, won: bool) -> Dict[str, int]:
        score = self.identity_registry.record_result(socket_id, won)
        if score is None:
            # Connection went away between guess and scoring; nothing to credit
            logger.warning(f"Could not record result for {username}: connection gone")
            existing = self.identity_registry.get_score(username)
            return existing.to_dict() if existing else {'correct': 0, 'total': 0}

        self.leaderboard_service.record_outcome(username, score)
        return score.to_dict()
