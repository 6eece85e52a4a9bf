"""
Fallback Response Service - Canned bot replies.

Used whenever the completion service is unconfigured or fails, so a bot game
never stalls waiting for text.
"""

import logging
import random
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


GENERIC_RESPONSES = (
    "That's interesting! Tell me more about that.",
    "I haven't really thought about it that way before.",
    "Oh wow, that reminds me of something similar that happened to me.",
    "Hmm, I'm not sure I understand. Can you explain?",
    "Yeah, I totally get what you mean!",
    "That's actually pretty funny when you think about it.",
    "I was just thinking about that the other day!",
    "Really? I had no idea. That's fascinating.",
    "I feel the same way sometimes.",
    "What made you think of that?",
)

QUESTION_RESPONSES = (
    "Good question! I'd say it depends on the situation.",
    "Let me think... probably yes, but I'm not 100% sure.",
    "I don't have a strong opinion on that, what do you think?",
    "That's tough to answer. Maybe?",
)

QUESTION_MARKER = '?'


class FallbackResponseService:
    """Picks a random reply from a fixed pool."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def get_pool(self, message: Any) -> List[str]:
        """
        Get the reply pool for an incoming message.

        Questions extend the generic pool with question-acknowledging replies.
        """
        pool = list(GENERIC_RESPONSES)
        if isinstance(message, str) and QUESTION_MARKER in message:
            pool.extend(QUESTION_RESPONSES)
        return pool

    def generate(self, message: Any = '') -> str:
        """
        Get a reply for any input, including empty or non-string input.

        Returns:
            A non-empty reply
        """
        pool = self.get_pool(message)
        return self._rng.choice(pool)
