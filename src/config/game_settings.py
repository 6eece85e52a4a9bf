"""
Game Settings Configuration Module

Provides centralized access to game-specific configuration values,
replacing hardcoded constants throughout the codebase.
"""

import logging

logger = logging.getLogger(__name__)


class GameSettings:
    """Centralized game settings management."""

    def __init__(self, app_config=None):
        """
        Initialize game settings.

        Args:
            app_config: Application configuration instance from config_factory
        """
        self._config = app_config
        if app_config is None:
            try:
                from config_factory import get_config
                self._config = get_config()
            except (ImportError, Exception) as e:
                logger.warning(f"Could not load configuration: {e}, using defaults")
                self._config = None

    def _get(self, name: str, default):
        if self._config is None:
            return default
        if isinstance(self._config, dict):
            return self._config.get(name, default)
        return getattr(self._config, name, default)

    @property
    def game_duration_ms(self) -> int:
        """Length of one game in milliseconds."""
        return self._get('game_duration_seconds', 180) * 1000

    @property
    def bot_match_delay_ms(self) -> int:
        """Minimum delay between an enqueue call and a bot pairing."""
        return self._get('bot_match_delay_ms', 3000)

    @property
    def human_match_probability(self) -> float:
        """Chance of pairing two humans when someone is already waiting."""
        return self._get('human_match_probability', 0.5)

    @property
    def bot_greeting_delay_ms(self) -> int:
        return self._get('bot_greeting_delay_ms', 2000)

    @property
    def bot_typing_delay_range_ms(self) -> tuple:
        """
        Get the (min, max) simulated typing delay for bot replies.

        Returns:
            Tuple of milliseconds, min <= max
        """
        return (
            self._get('bot_typing_delay_min_ms', 1000),
            self._get('bot_typing_delay_max_ms', 3000),
        )

    @property
    def leaderboard_size(self) -> int:
        return self._get('leaderboard_size', 100)

    @property
    def leaderboard_broadcast_size(self) -> int:
        return self._get('leaderboard_broadcast_size', 10)

    @property
    def api_leaderboard_size(self) -> int:
        return self._get('api_leaderboard_size', 20)

    @property
    def max_message_length(self) -> int:
        return self._get('max_message_length', 500)

    @property
    def max_username_length(self) -> int:
        return self._get('max_username_length', 30)


# Global instance for easy access
_game_settings_instance = None


def get_game_settings(app_config=None) -> GameSettings:
    """
    Get or create the global game settings instance.

    Args:
        app_config: Optional app config to use

    Returns:
        GameSettings instance
    """
    global _game_settings_instance

    if _game_settings_instance is None or app_config is not None:
        _game_settings_instance = GameSettings(app_config)

    return _game_settings_instance


def reset_game_settings():
    """Reset the global game settings instance (mainly for testing)."""
    global _game_settings_instance
    _game_settings_instance = None


def create_game_settings(**config) -> GameSettings:
    """Build settings from a plain configuration dictionary."""
    return GameSettings(config or None)
