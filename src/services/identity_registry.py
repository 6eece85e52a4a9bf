"""
Identity Registry - Maps Socket.IO connections to user profiles and scores.

This service handles:
- User registration on join
- Socket ID to user mapping
- Per-username running scores that outlive a single connection
- Connection liveness checks for matchmaking
"""

import logging
import random
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class Score:
    """Running score for one username."""
    correct: int = 0
    total: int = 0

    @property
    def accuracy(self) -> int:
        """Percentage of correct outcomes, rounded to an integer."""
        if self.total == 0:
            return 0
        return round(self.correct / self.total * 100)

    def to_dict(self) -> Dict[str, int]:
        return {'correct': self.correct, 'total': self.total}


@dataclass
class User:
    """A connected user."""
    id: str
    display_name: str
    score: Score

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'username': self.display_name,
            'score': self.score.to_dict()
        }


class IdentityRegistry:
    """Owns connected users and their scores."""

    def __init__(self, rng: Optional[random.Random] = None):
        """Initialize the identity registry.

        Args:
            rng: Random source used for generated display names
        """
        self._rng = rng or random.Random()
        # socket_id -> User
        self._users: Dict[str, User] = {}
        # display_name -> Score, kept after disconnect
        self._scores: Dict[str, Score] = {}
        self._lock = threading.RLock()
        logger.info("IdentityRegistry initialized")

    def register(self, socket_id: str, username: Optional[str] = None) -> User:
        """Create or replace the user bound to a connection.

        Args:
            socket_id: Socket.IO connection ID
            username: Display name, or None to generate one

        Returns:
            The registered user, carrying any score earned under the same name
        """
        with self._lock:
            display_name = username or f"Player{self._rng.randint(0, 9999)}"
            score = self._scores.setdefault(display_name, Score())
            user = User(id=socket_id, display_name=display_name, score=score)
            self._users[socket_id] = user
            logger.debug(f"Registered user {display_name} on socket {socket_id}")
            return user

    def get_user(self, socket_id: str) -> Optional[User]:
        """Get the user bound to a connection, or None."""
        return self._users.get(socket_id)

    def is_connected(self, socket_id: str) -> bool:
        """Check if a connection is still registered."""
        return socket_id in self._users

    def remove(self, socket_id: str) -> Optional[User]:
        """Drop a connection. Scores stay keyed by display name.

        Args:
            socket_id: Socket.IO connection ID

        Returns:
            The removed user or None if not found
        """
        with self._lock:
            user = self._users.pop(socket_id, None)
            if user:
                logger.debug(f"Removed user {user.display_name} ({socket_id})")
            return user

    def record_result(self, socket_id: str, won: bool) -> Optional[Score]:
        """Count one finished game for the user on this connection.

        Args:
            socket_id: Socket.IO connection ID
            won: Whether the game counts as a win for the user's role

        Returns:
            The updated score, or None if the connection is gone
        """
        with self._lock:
            user = self._users.get(socket_id)
            if user is None:
                return None

            user.score.total += 1
            if won:
                user.score.correct += 1
            return Score(user.score.correct, user.score.total)

    def get_score(self, username: str) -> Optional[Score]:
        """Get the score recorded for a display name."""
        return self._scores.get(username)

    def get_user_data(self, socket_id: str) -> Tuple[Optional[str], Optional[Score]]:
        """Get user data as tuple for convenience.

        Returns:
            Tuple of (display_name, score) or (None, None)
        """
        user = self._users.get(socket_id)
        if user:
            return user.display_name, user.score
        return None, None

    def scored_user_count(self) -> int:
        """Number of distinct usernames with at least one recorded game."""
        return sum(1 for score in self._scores.values() if score.total > 0)

    def connected_count(self) -> int:
        return len(self._users)
