"""
Core error definitions for AmIaBot

Provides error codes and validation exception that don't depend on other services.
"""

from enum import Enum
from typing import Dict, Optional


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    # Payload Errors
    INVALID_DATA = "INVALID_DATA"
    MISSING_DATA = "MISSING_DATA"
    INVALID_USERNAME = "INVALID_USERNAME"
    USERNAME_TOO_LONG = "USERNAME_TOO_LONG"
    EMPTY_MESSAGE = "EMPTY_MESSAGE"
    MESSAGE_TOO_LONG = "MESSAGE_TOO_LONG"
    MISSING_GUESS = "MISSING_GUESS"
    INVALID_GUESS = "INVALID_GUESS"

    # Game Flow Errors
    NOT_JOINED = "NOT_JOINED"
    ALREADY_IN_GAME = "ALREADY_IN_GAME"
    NOT_DETECTIVE = "NOT_DETECTIVE"

    # System Errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    RATE_LIMITED = "RATE_LIMITED"


class ValidationError(Exception):
    """Custom exception for validation errors."""

    def __init__(self, code: ErrorCode, message: str, details: Optional[Dict] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)
