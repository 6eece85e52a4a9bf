"""
Leaderboard Service for AmIaBot

Keeps a bounded, ranked view of user scores. Entries are derived from the
identity registry's scores and rebuilt on every adjudication.
"""

import logging
import threading
from typing import Dict, List, Optional

from src.config.game_settings import get_game_settings

logger = logging.getLogger(__name__)


def sort_key(entry: Dict) -> tuple:
    """Correct guesses descending, then accuracy descending."""
    return (-entry['score'], -entry['accuracy'])


class LeaderboardService:
    """Ranks users by correct-guess count with accuracy tie-break."""

    def __init__(self, settings=None, max_entries: Optional[int] = None):
        """
        Initialize the leaderboard.

        Args:
            settings: Game settings supplying the default size bound
            max_entries: Explicit size bound of the ranked view
        """
        self.max_entries = max_entries or (settings or get_game_settings()).leaderboard_size
        self._entries: List[Dict] = []
        self._lock = threading.Lock()

    def record_outcome(self, username: str, score) -> List[Dict]:
        """
        Reinsert a user's entry from their current score.

        The old entry is removed and a fresh one inserted, then the view is
        re-sorted and truncated.

        Args:
            username: Display name the score is keyed by
            score: Score with correct/total counts

        Returns:
            A copy of the ranked view
        """
        entry = {
            'username': username,
            'score': score.correct,
            'total': score.total,
            'accuracy': round(score.correct / score.total * 100) if score.total > 0 else 0
        }

        with self._lock:
            entries = [e for e in self._entries if e['username'] != username]
            entries.append(entry)
            # sorted() is stable, so equal keys keep their relative order
            self._entries = sorted(entries, key=sort_key)[:self.max_entries]
            logger.debug(f"Leaderboard updated for {username}: {entry}")
            return list(self._entries)

    def top_k(self, n: int) -> List[Dict]:
        """Get the first n entries of the ranked view."""
        with self._lock:
            return [dict(e) for e in self._entries[:max(n, 0)]]

    def get_rank(self, username: str) -> Optional[int]:
        """Get a user's 1-based rank, or None if not ranked."""
        with self._lock:
            for i, entry in enumerate(self._entries):
                if entry['username'] == username:
                    return i + 1
        return None

    def __len__(self) -> int:
        return len(self._entries)
