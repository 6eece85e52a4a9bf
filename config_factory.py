"""
Configuration Factory - Centralized configuration management for AmIaBot
Provides type-safe configuration with validation and environment-specific settings.
"""

import os
import logging
from typing import Any, Dict, Optional, Type
from enum import Enum
from dataclasses import dataclass, field


class Environment(Enum):
    """Environment types for configuration"""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ConfigError(Exception):
    """Configuration-related errors"""
    pass


@dataclass
class AppConfig:
    """Application configuration with type safety and validation"""

    # Core Flask settings
    secret_key: str = field(default_factory=lambda: 'dev-secret-key-change-in-production')
    debug: bool = False
    flask_env: str = 'development'  # Default to development for safety

    # Server settings
    host: str = '0.0.0.0'
    port: int = 3001

    # Game settings
    game_duration_seconds: int = 180
    bot_match_delay_ms: int = 3000
    human_match_probability: float = 0.5
    bot_greeting_delay_ms: int = 2000
    bot_typing_delay_min_ms: int = 1000
    bot_typing_delay_max_ms: int = 3000
    max_message_length: int = 500  # characters
    max_username_length: int = 30  # characters

    # Leaderboard settings
    leaderboard_size: int = 100
    leaderboard_broadcast_size: int = 10
    api_leaderboard_size: int = 20

    # Completion service settings
    openai_api_key: Optional[str] = None
    openai_model: str = 'gpt-3.5-turbo'
    openai_base_url: Optional[str] = None
    completion_timeout_seconds: float = 8.0
    completion_temperature: float = 0.9
    completion_max_tokens: int = 150

    # Randomness (None = seeded from the OS)
    random_seed: Optional[int] = None

    # Rate Limiting settings
    max_events_per_second: int = 10  # max events per client per second
    max_events_per_minute: int = 100  # max events per client per minute
    rate_limit_block_seconds: int = 60

    # File paths
    personas_file: str = 'personas.yaml'

    # Gunicorn settings (for production deployment)
    worker_connections: int = 1000
    timeout: int = 30
    keepalive: int = 2
    log_level: str = 'info'

    # Environment
    environment: Environment = Environment.DEVELOPMENT

    def __post_init__(self):
        """Validate configuration after initialization"""
        self._validate()

    def _validate(self):
        """Validate configuration values"""
        if self.port < 1 or self.port > 65535:
            raise ConfigError(f"Invalid port number: {self.port}")

        if self.game_duration_seconds < 10 or self.game_duration_seconds > 1800:  # 10s to 30min
            raise ConfigError(f"Invalid game_duration_seconds: {self.game_duration_seconds}")

        if self.bot_match_delay_ms < 0 or self.bot_match_delay_ms > 60000:
            raise ConfigError(f"Invalid bot_match_delay_ms: {self.bot_match_delay_ms}")

        if self.human_match_probability < 0 or self.human_match_probability > 1:
            raise ConfigError(f"Invalid human_match_probability: {self.human_match_probability}")

        if self.bot_greeting_delay_ms < 0 or self.bot_greeting_delay_ms > 60000:
            raise ConfigError(f"Invalid bot_greeting_delay_ms: {self.bot_greeting_delay_ms}")

        if self.bot_typing_delay_min_ms < 0 or self.bot_typing_delay_min_ms > self.bot_typing_delay_max_ms:
            raise ConfigError(f"Invalid bot_typing_delay_min_ms: {self.bot_typing_delay_min_ms}")

        if self.bot_typing_delay_max_ms > 60000:
            raise ConfigError(f"Invalid bot_typing_delay_max_ms: {self.bot_typing_delay_max_ms}")

        if self.max_message_length < 10 or self.max_message_length > 5000:
            raise ConfigError(f"Invalid max_message_length: {self.max_message_length}")

        if self.max_username_length < 1 or self.max_username_length > 100:
            raise ConfigError(f"Invalid max_username_length: {self.max_username_length}")

        if self.leaderboard_size < 1 or self.leaderboard_size > 10000:
            raise ConfigError(f"Invalid leaderboard_size: {self.leaderboard_size}")

        if self.leaderboard_broadcast_size < 1 or self.leaderboard_broadcast_size > self.leaderboard_size:
            raise ConfigError(f"Invalid leaderboard_broadcast_size: {self.leaderboard_broadcast_size}")

        if self.api_leaderboard_size < 1 or self.api_leaderboard_size > self.leaderboard_size:
            raise ConfigError(f"Invalid api_leaderboard_size: {self.api_leaderboard_size}")

        if self.completion_timeout_seconds <= 0 or self.completion_timeout_seconds > 120:
            raise ConfigError(f"Invalid completion_timeout_seconds: {self.completion_timeout_seconds}")

        if self.completion_max_tokens < 1 or self.completion_max_tokens > 4000:
            raise ConfigError(f"Invalid completion_max_tokens: {self.completion_max_tokens}")

        # Rate Limiting validations
        if self.max_events_per_second < 1 or self.max_events_per_second > 1000:
            raise ConfigError(f"Invalid max_events_per_second: {self.max_events_per_second}")

        if self.max_events_per_minute < self.max_events_per_second or self.max_events_per_minute > 10000:
            raise ConfigError(f"Invalid max_events_per_minute: {self.max_events_per_minute}")

        if self.environment == Environment.PRODUCTION and self.secret_key == 'dev-secret-key-change-in-production':
            raise ConfigError("Production environment requires a secure SECRET_KEY")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode"""
        return self.environment == Environment.TESTING

    @property
    def completion_configured(self) -> bool:
        """Check if an API key for the completion service is present"""
        return bool(self.openai_api_key)


class ConfigurationFactory:
    """
    Factory for creating and managing application configuration.

    Features:
    - Environment variable loading with type conversion
    - Configuration validation
    - Environment-specific defaults
    - Singleton pattern for global config access
    """

    _instance: Optional['ConfigurationFactory'] = None
    _config: Optional[AppConfig] = None

    def __new__(cls) -> 'ConfigurationFactory':
        """Singleton pattern implementation"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the configuration factory"""
        if not hasattr(self, '_initialized'):
            self._logger = logging.getLogger(__name__)
            self._env_overrides: Dict[str, Any] = {}
            self._initialized = True

    def load_from_environment(self, env_prefix: str = '') -> AppConfig:
        """
        Load configuration from environment variables.

        Args:
            env_prefix: Optional prefix for environment variables (e.g., 'AMIABOT_')

        Returns:
            Configured AppConfig instance
        """
        def get_env_var(key: str, default: Any = None, var_type: Type = str) -> Any:
            """Get environment variable with type conversion"""
            env_key = f"{env_prefix}{key}" if env_prefix else key
            value = os.environ.get(env_key)

            if value is None or value == '':
                return default

            # Type conversion
            if var_type == bool:
                return value.lower() in ('true', '1', 'yes', 'on')
            elif var_type == int:
                try:
                    return int(value)
                except ValueError:
                    self._logger.warning(f"Invalid integer value for {env_key}: {value}, using default: {default}")
                    return default
            elif var_type == float:
                try:
                    return float(value)
                except ValueError:
                    self._logger.warning(f"Invalid float value for {env_key}: {value}, using default: {default}")
                    return default
            else:
                return value

        # Determine environment
        flask_env = get_env_var('FLASK_ENV', 'development')
        if flask_env == 'development':
            environment = Environment.DEVELOPMENT
            debug = True
        elif flask_env == 'testing':
            environment = Environment.TESTING
            debug = True
        else:
            environment = Environment.PRODUCTION
            debug = False

        config = AppConfig(
            # Core Flask settings
            secret_key=get_env_var('SECRET_KEY', 'dev-secret-key-change-in-production'),
            debug=get_env_var('DEBUG', debug, bool),
            flask_env=flask_env,

            # Server settings
            host=get_env_var('HOST', '0.0.0.0'),
            port=get_env_var('PORT', 3001, int),

            # Game settings
            game_duration_seconds=get_env_var('GAME_DURATION_SECONDS', 180, int),
            bot_match_delay_ms=get_env_var('BOT_MATCH_DELAY_MS', 3000, int),
            human_match_probability=get_env_var('HUMAN_MATCH_PROBABILITY', 0.5, float),
            bot_greeting_delay_ms=get_env_var('BOT_GREETING_DELAY_MS', 2000, int),
            bot_typing_delay_min_ms=get_env_var('BOT_TYPING_DELAY_MIN_MS', 1000, int),
            bot_typing_delay_max_ms=get_env_var('BOT_TYPING_DELAY_MAX_MS', 3000, int),
            max_message_length=get_env_var('MAX_MESSAGE_LENGTH', 500, int),
            max_username_length=get_env_var('MAX_USERNAME_LENGTH', 30, int),

            # Leaderboard settings
            leaderboard_size=get_env_var('LEADERBOARD_SIZE', 100, int),
            leaderboard_broadcast_size=get_env_var('LEADERBOARD_BROADCAST_SIZE', 10, int),
            api_leaderboard_size=get_env_var('API_LEADERBOARD_SIZE', 20, int),

            # Completion service settings
            openai_api_key=get_env_var('OPENAI_API_KEY', None),
            openai_model=get_env_var('OPENAI_MODEL', 'gpt-3.5-turbo'),
            openai_base_url=get_env_var('OPENAI_BASE_URL', None),
            completion_timeout_seconds=get_env_var('COMPLETION_TIMEOUT_SECONDS', 8.0, float),
            completion_temperature=get_env_var('COMPLETION_TEMPERATURE', 0.9, float),
            completion_max_tokens=get_env_var('COMPLETION_MAX_TOKENS', 150, int),

            random_seed=get_env_var('RANDOM_SEED', None, int),

            # Rate Limiting settings
            max_events_per_second=get_env_var('MAX_EVENTS_PER_SECOND', 10, int),
            max_events_per_minute=get_env_var('MAX_EVENTS_PER_MINUTE', 100, int),
            rate_limit_block_seconds=get_env_var('RATE_LIMIT_BLOCK_SECONDS', 60, int),

            # File paths
            personas_file=get_env_var('PERSONAS_FILE', 'personas.yaml'),

            # Gunicorn settings
            worker_connections=get_env_var('WORKER_CONNECTIONS', 1000, int),
            timeout=get_env_var('TIMEOUT', 30, int),
            keepalive=get_env_var('KEEPALIVE', 2, int),
            log_level=get_env_var('LOG_LEVEL', 'info'),

            # Environment
            environment=environment
        )

        # Apply any manual overrides
        for key, value in self._env_overrides.items():
            if hasattr(config, key):
                setattr(config, key, value)

        self._config = config
        self._logger.info(f"Configuration loaded for environment: {environment.value}")
        return config

    def load_from_dict(self, config_dict: Dict[str, Any]) -> AppConfig:
        """
        Load configuration from dictionary (useful for testing).

        Args:
            config_dict: Dictionary of configuration values

        Returns:
            Configured AppConfig instance
        """
        config_dict = dict(config_dict)
        if 'environment' in config_dict and isinstance(config_dict['environment'], str):
            config_dict['environment'] = Environment(config_dict['environment'])

        self._config = AppConfig(**config_dict)
        return self._config

    def override_setting(self, key: str, value: Any) -> 'ConfigurationFactory':
        """
        Override a specific configuration setting.

        Args:
            key: Configuration key to override
            value: New value for the setting

        Returns:
            Self for method chaining
        """
        self._env_overrides[key] = value

        if self._config and hasattr(self._config, key):
            setattr(self._config, key, value)
            self._config._validate()  # Re-validate after change

        return self

    def get_config(self) -> AppConfig:
        """
        Get the current configuration.

        Returns:
            Current AppConfig instance

        Raises:
            ConfigError: If no configuration has been loaded
        """
        if self._config is None:
            raise ConfigError("Configuration not loaded. Call load_from_environment() or load_from_dict() first.")
        return self._config

    def reset(self) -> 'ConfigurationFactory':
        """Reset the factory (useful for testing)"""
        self._config = None
        self._env_overrides.clear()
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert current configuration to dictionary"""
        if self._config is None:
            raise ConfigError("Configuration not loaded")

        config_dict = {}
        for field_info in self._config.__dataclass_fields__.values():
            value = getattr(self._config, field_info.name)
            if isinstance(value, Environment):
                config_dict[field_info.name] = value.value
            else:
                config_dict[field_info.name] = value

        return config_dict

    def get_flask_config(self) -> Dict[str, Any]:
        """
        Get Flask-compatible configuration dictionary.

        Returns:
            Dictionary suitable for Flask app.config.update()
        """
        if self._config is None:
            raise ConfigError("Configuration not loaded")

        return {
            'SECRET_KEY': self._config.secret_key,
            'DEBUG': self._config.debug,
            'ENV': self._config.flask_env,
            'GAME_DURATION_SECONDS': self._config.game_duration_seconds,
            'MAX_MESSAGE_LENGTH': self._config.max_message_length,
            'PERSONAS_FILE': self._config.personas_file,
        }


# Global factory instance
_config_factory = ConfigurationFactory()


def get_config() -> AppConfig:
    """Get the global application configuration"""
    return _config_factory.get_config()


def load_config(env_prefix: str = '') -> AppConfig:
    """Load configuration from environment variables"""
    return _config_factory.load_from_environment(env_prefix)


def load_config_from_dict(config_dict: Dict[str, Any]) -> AppConfig:
    """Load configuration from dictionary"""
    return _config_factory.load_from_dict(config_dict)


def override_config(key: str, value: Any) -> ConfigurationFactory:
    """Override a configuration setting"""
    return _config_factory.override_setting(key, value)


def reset_config() -> ConfigurationFactory:
    """Reset configuration (for testing)"""
    return _config_factory.reset()
