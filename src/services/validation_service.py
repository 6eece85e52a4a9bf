"""
Validation Service for AmIaBot

Provides input validation and sanitization for inbound Socket.IO payloads,
separated from error response handling.
"""

import logging
import re
from typing import Any, Dict, Optional

from src.core.errors import ErrorCode, ValidationError
from src.core.game_types import Guess

logger = logging.getLogger(__name__)


class ValidationService:
    """Service responsible for input validation and sanitization."""

    # Control characters except newline and tab
    CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')

    def __init__(self, settings=None):
        """Initialize ValidationService with game settings"""
        self._settings = settings

    @property
    def game_settings(self):
        if self._settings is None:
            from src.config.game_settings import get_game_settings
            self._settings = get_game_settings()
        return self._settings

    def validate_data_dict(self, data: Any, allow_empty: bool = False) -> Dict:
        """
        Validate that a Socket.IO payload is a dictionary.

        Args:
            data: Raw data from Socket.IO event
            allow_empty: Treat a missing payload as an empty dict

        Returns:
            Validated data dictionary

        Raises:
            ValidationError: If data is not a dictionary
        """
        if data is None and allow_empty:
            return {}

        if not isinstance(data, dict):
            raise ValidationError(
                ErrorCode.INVALID_DATA,
                "Invalid data format - expected dictionary"
            )
        return data

    def validate_username(self, username: Any) -> Optional[str]:
        """
        Validate an optional display name.

        Returns:
            The stripped name, or None when none was given (a default is assigned later)

        Raises:
            ValidationError: If the name is not a string or too long
        """
        if username is None:
            return None

        if not isinstance(username, str):
            raise ValidationError(
                ErrorCode.INVALID_USERNAME,
                "Username must be a string"
            )

        username = self.CONTROL_CHARS.sub('', username).strip()
        if not username:
            return None

        max_length = self.game_settings.max_username_length
        if len(username) > max_length:
            raise ValidationError(
                ErrorCode.USERNAME_TOO_LONG,
                f"Username must be {max_length} characters or less",
                {"max_length": max_length, "actual_length": len(username)}
            )

        return username

    def validate_message_text(self, data: Dict) -> str:
        """
        Validate chat message text.

        Accepts the text under 'text' or, for older clients, 'message'.

        Raises:
            ValidationError: If the text is missing, empty or too long
        """
        text = data.get('text')
        if text is None:
            text = data.get('message')

        if not isinstance(text, str):
            raise ValidationError(
                ErrorCode.EMPTY_MESSAGE,
                "Message text is required"
            )

        text = self.CONTROL_CHARS.sub('', text).strip()
        if not text:
            raise ValidationError(
                ErrorCode.EMPTY_MESSAGE,
                "Message cannot be empty"
            )

        max_length = self.game_settings.max_message_length
        if len(text) > max_length:
            raise ValidationError(
                ErrorCode.MESSAGE_TOO_LONG,
                f"Message must be {max_length} characters or less",
                {"max_length": max_length, "actual_length": len(text)}
            )

        return text

    def validate_typing(self, data: Dict) -> bool:
        """Read the typing flag from 'typing' or the older 'isTyping' key."""
        if 'typing' in data:
            return bool(data['typing'])
        return bool(data.get('isTyping', False))

    def validate_guess(self, data: Dict) -> Guess:
        """
        Validate a guess payload.

        Raises:
            ValidationError: If the guess is missing or not 'human' / 'bot'
        """
        guess = data.get('guess')
        if guess is None:
            raise ValidationError(
                ErrorCode.MISSING_GUESS,
                "Guess is required"
            )

        if not isinstance(guess, str):
            raise ValidationError(
                ErrorCode.INVALID_GUESS,
                "Guess must be 'human' or 'bot'"
            )

        try:
            return Guess(guess.strip().lower())
        except ValueError:
            raise ValidationError(
                ErrorCode.INVALID_GUESS,
                "Guess must be 'human' or 'bot'",
                {"provided": guess}
            )
