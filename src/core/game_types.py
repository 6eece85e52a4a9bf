"""
Game Type Enumerations

Defines the roles, guesses, and session states used throughout the application.
"""

from enum import Enum


class Role(Enum):
    """Role a participant plays in a session."""
    DETECTIVE = "detective"
    RESPONDER = "responder"


class Guess(Enum):
    """What the detective believes their partner is."""
    HUMAN = "human"
    BOT = "bot"


class SessionStatus(Enum):
    """Session lifecycle state. ENDED is terminal."""
    ACTIVE = "active"
    ENDED = "ended"


class Outcome(Enum):
    """Adjudicated result of a session, from the detective's point of view."""
    UNSET = "unset"
    DETECTIVE_CORRECT = "detective_correct"
    DETECTIVE_INCORRECT = "detective_incorrect"


class OpponentKind(Enum):
    """Opponent hint sent with game-started. Bot games never reveal themselves."""
    HUMAN = "human"
    UNKNOWN = "unknown"
