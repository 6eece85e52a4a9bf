"""
Services package for AmIaBot

Contains decomposed service classes that follow Single Responsibility Principle.
"""

from .identity_registry import IdentityRegistry
from .matchmaker import Matchmaker
from .responder_adapter import HumanResponderAdapter, BotResponderAdapter, ResponderFactory
from .scoring_service import ScoringService
from .leaderboard_service import LeaderboardService
from .broadcast_service import BroadcastService
from .concurrency_control_service import ConcurrencyControlService
from .timer_service import TimerService
from .completion_service import CompletionService
from .fallback_response_service import FallbackResponseService

__all__ = [
    'IdentityRegistry',
    'Matchmaker',
    'HumanResponderAdapter',
    'BotResponderAdapter',
    'ResponderFactory',
    'ScoringService',
    'LeaderboardService',
    'BroadcastService',
    'ConcurrencyControlService',
    'TimerService',
    'CompletionService',
    'FallbackResponseService'
]
