"""
Global pytest configuration and fixtures.
Provides service fixtures for proper dependency injection in tests.
"""

import random

import pytest
import os
from unittest.mock import Mock

# Ensure testing environment
os.environ['TESTING'] = '1'

from tests.helpers.fake_timers import FakeTimerService
from tests.helpers.socket_mocks import create_mock_socketio


def _test_config():
    from config_factory import ConfigurationFactory
    config_factory = ConfigurationFactory()
    config_factory.load_from_environment()
    config = config_factory.to_dict()
    # Bots must never reach a real endpoint from the test suite
    config['openai_api_key'] = None
    return config


@pytest.fixture(scope="function", autouse=True)
def reset_global_container():
    """Reset the global container before each test to ensure clean state."""
    from container import reset_container, configure_container
    from src.config.game_settings import reset_game_settings

    reset_container()
    reset_game_settings()

    try:
        from app import socketio as app_socketio
        configure_container(socketio=app_socketio, config=_test_config())
    except ImportError:
        pass

    yield

    reset_container()


@pytest.fixture(scope="session")
def app():
    """Create Flask app for testing."""
    from app import app as flask_app
    return flask_app


@pytest.fixture(scope="session")
def socketio():
    """Create SocketIO instance for testing."""
    from app import socketio as socketio_instance
    return socketio_instance


@pytest.fixture(scope="function")
def fake_timers():
    """Manually fired timers installed in the global container."""
    from container import get_container
    timers = FakeTimerService()
    get_container().set_external_dependency('TimerService', timers)
    return timers


@pytest.fixture(scope="function")
def rng():
    """Seeded random source installed in the global container."""
    from container import get_container
    source = random.Random(1234)
    get_container().set_external_dependency('RandomSource', source)
    return source


@pytest.fixture(scope="function")
def mock_socketio():
    return create_mock_socketio()


@pytest.fixture(scope="function")
def container(mock_socketio, fake_timers, rng):
    """Global container wired to a mock SocketIO, fake timers and a seeded random source."""
    from container import get_container
    container = get_container()
    container.set_external_dependency('socketio', mock_socketio)
    return container


@pytest.fixture(scope="function")
def identity_registry(container):
    return container.get('IdentityRegistry')


@pytest.fixture(scope="function")
def game_manager(container):
    """Provide GameManager service through dependency injection."""
    return container.get('GameManager')


@pytest.fixture(scope="function")
def matchmaker(container):
    return container.get('Matchmaker')


@pytest.fixture(scope="function")
def broadcast_service(container):
    """Provide BroadcastService through dependency injection."""
    return container.get('BroadcastService')


@pytest.fixture(scope="function")
def leaderboard_service(container):
    return container.get('LeaderboardService')


@pytest.fixture(scope="function")
def scoring_service(container):
    return container.get('ScoringService')


@pytest.fixture(scope="function")
def validation_service(container):
    """Provide ValidationService through dependency injection."""
    return container.get('ValidationService')


@pytest.fixture(scope="function")
def error_response_factory(container):
    """Provide ErrorResponseFactory through dependency injection."""
    return container.get('ErrorResponseFactory')


@pytest.fixture(scope="function")
def mock_completion_client():
    """OpenAI-shaped client whose chat.completions.create is a Mock."""
    client = Mock()
    client.chat.completions.create = Mock()
    return client
