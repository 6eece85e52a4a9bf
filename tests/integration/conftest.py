"""
Fixtures for end-to-end Socket.IO flows against the real application.

Timers are replaced with manually fired ones and randomness is seeded, so
matchmaking and bot replies happen exactly when a test says so.
"""

import pytest
from unittest.mock import Mock
from flask_socketio import SocketIOTestClient


@pytest.fixture
def services(fake_timers, rng):
    """Global container with fake timers and seeded randomness installed."""
    from container import get_container
    return get_container()


@pytest.fixture
def set_match_coin(services):
    """Fix the matchmaker's human-pairing draw to a value."""
    def _set(value):
        services.get('Matchmaker').rng = Mock(random=Mock(return_value=value))
    return _set


@pytest.fixture
def make_client(app, socketio, services):
    """Create connected test clients, disconnecting any still connected at teardown."""
    clients = []

    def _make():
        client = SocketIOTestClient(app, socketio)
        client.get_received()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        if client.is_connected():
            client.disconnect()
