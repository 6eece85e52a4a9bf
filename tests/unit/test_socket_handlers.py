"""
Socket Handler Unit Tests

Tests for the Socket.IO event handlers, called directly with the request
context patched so each call appears to come from a given connection.
"""

import pytest
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

from src.core.game_types import Role
from src.handlers.chat_handler import ChatHandler
from src.handlers.game_action_handler import GameActionHandler
from src.handlers.game_info_handler import GameInfoHandler
from src.handlers.matchmaking_handler import MatchmakingHandler
from src.handlers import socket_handlers
from tests.helpers.socket_mocks import emitted


@pytest.fixture
def as_client(container):
    """Context manager that makes handler calls come from one connection.

    Yields the mock used for direct emits (errors and the connect ack).
    """
    @contextmanager
    def _as_client(sid):
        with patch('src.handlers.base_handler.request', new=MagicMock()) as base_request, \
                patch('src.services.rate_limit_service.request', new=MagicMock()) as rate_request, \
                patch('src.handlers.socket_handlers.request', new=MagicMock()) as handlers_request, \
                patch('src.services.error_response_factory.emit') as error_emit:
            for mock_request in (base_request, rate_request, handlers_request):
                mock_request.sid = sid
            yield error_emit
    return _as_client


def error_codes(error_emit):
    return [c[0][1]['error']['code'] for c in error_emit.call_args_list if c[0][0] == 'error']


@pytest.fixture
def human_game(identity_registry, game_manager):
    identity_registry.register('sid-a', 'Alice')
    identity_registry.register('sid-b', 'Bob')
    return game_manager.create_human_session('sid-a', 'sid-b')


class TestJoinGame:
    """Test the join-game handler"""

    def test_join_registers_and_queues(self, as_client, identity_registry, matchmaker, mock_socketio):
        with as_client('sid-a'):
            MatchmakingHandler().handle_join_game({'username': 'Alice'})

        assert identity_registry.get_user('sid-a').display_name == 'Alice'
        assert matchmaker.is_waiting('sid-a')
        assert emitted(mock_socketio, 'matching-started', to='sid-a') == [None]

    def test_join_without_payload_gets_default_name(self, as_client, identity_registry):
        with as_client('sid-a'):
            MatchmakingHandler().handle_join_game()

        assert identity_registry.get_user('sid-a').display_name

    def test_join_twice_while_waiting_is_noop(self, as_client, matchmaker, mock_socketio):
        with as_client('sid-a') as error_emit:
            handler = MatchmakingHandler()
            handler.handle_join_game({'username': 'Alice'})
            handler.handle_join_game({'username': 'Alice'})

        assert error_codes(error_emit) == []
        assert matchmaker.queue_length() == 1
        assert len(emitted(mock_socketio, 'matching-started', to='sid-a')) == 1

    def test_join_while_in_game(self, as_client, human_game):
        with as_client('sid-a') as error_emit:
            MatchmakingHandler().handle_join_game({})

        assert error_codes(error_emit) == ['ALREADY_IN_GAME']

    def test_join_with_long_name(self, as_client, identity_registry):
        with as_client('sid-a') as error_emit:
            MatchmakingHandler().handle_join_game({'username': 'x' * 200})

        assert error_codes(error_emit) == ['USERNAME_TOO_LONG']
        assert identity_registry.get_user('sid-a') is None


class TestChat:
    """Test the send-message and typing handlers"""

    def test_message_relayed(self, as_client, human_game, mock_socketio):
        with as_client('sid-a'):
            ChatHandler().handle_send_message({'text': 'hello'})

        assert emitted(mock_socketio, 'receive-message', to='sid-b') == [{'text': 'hello', 'sender': 'opponent'}]

    def test_empty_message_rejected(self, as_client, human_game, mock_socketio):
        with as_client('sid-a') as error_emit:
            ChatHandler().handle_send_message({'text': '  '})

        assert error_codes(error_emit) == ['EMPTY_MESSAGE']
        assert emitted(mock_socketio, 'receive-message') == []

    def test_message_without_game_dropped(self, as_client, identity_registry, mock_socketio):
        identity_registry.register('sid-a', 'Alice')
        with as_client('sid-a') as error_emit:
            ChatHandler().handle_send_message({'text': 'anyone?'})

        assert error_codes(error_emit) == []
        assert emitted(mock_socketio, 'receive-message') == []

    def test_typing_legacy_key(self, as_client, human_game, mock_socketio):
        with as_client('sid-b'):
            ChatHandler().handle_typing({'isTyping': True})

        assert emitted(mock_socketio, 'opponent-typing', to='sid-a') == [{'typing': True}]


class TestSubmitGuess:
    """Test the submit-guess handler"""

    def test_guess_ends_game_and_broadcasts(self, as_client, human_game, mock_socketio):
        detective = human_game.detective.connection_id
        responder = human_game.responder.connection_id

        with as_client(detective):
            GameActionHandler().handle_submit_guess({'guess': 'human'})

        assert not human_game.is_active
        detective_result = emitted(mock_socketio, 'game-result', to=detective)[0]
        responder_result = emitted(mock_socketio, 'game-result', to=responder)[0]
        assert detective_result['correct'] is True
        assert responder_result['correct'] is False
        leaderboard = emitted(mock_socketio, 'leaderboard-updated')[0]
        assert [e['username'] for e in leaderboard] == [
            human_game.detective.display_name, human_game.responder.display_name
        ]

    def test_responder_cannot_guess(self, as_client, human_game, mock_socketio):
        with as_client(human_game.responder.connection_id) as error_emit:
            GameActionHandler().handle_submit_guess({'guess': 'bot'})

        assert error_codes(error_emit) == ['NOT_DETECTIVE']
        assert human_game.is_active

    def test_invalid_guess(self, as_client, human_game):
        with as_client(human_game.detective.connection_id) as error_emit:
            GameActionHandler().handle_submit_guess({'guess': 'maybe'})

        assert error_codes(error_emit) == ['INVALID_GUESS']
        assert human_game.is_active

    def test_second_guess_ignored(self, as_client, human_game, mock_socketio):
        detective = human_game.detective.connection_id
        with as_client(detective) as error_emit:
            handler = GameActionHandler()
            handler.handle_submit_guess({'guess': 'human'})
            handler.handle_submit_guess({'guess': 'bot'})

        assert error_codes(error_emit) == []
        assert len(emitted(mock_socketio, 'game-result', to=detective)) == 1

    def test_bot_game_has_single_result(self, as_client, identity_registry, game_manager, mock_socketio):
        identity_registry.register('sid-a', 'Alice')
        session = game_manager.create_bot_session('sid-a')

        with as_client('sid-a'):
            GameActionHandler().handle_submit_guess({'guess': 'bot'})

        assert session.role_of('sid-a') == Role.DETECTIVE
        assert emitted(mock_socketio, 'game-result', to='sid-a')[0]['wasAI'] is True
        assert len(emitted(mock_socketio, 'game-result')) == 1

    def test_end_game_early(self, as_client, human_game, mock_socketio):
        with as_client('sid-a'):
            GameActionHandler().handle_end_game_early()

        assert emitted(mock_socketio, 'proceed-to-guess', to='sid-a') == [None]
        assert human_game.is_active


class TestLeaderboardRequest:
    """Test the get-leaderboard handler"""

    def test_sends_leaderboard_to_requester(self, as_client, identity_registry, leaderboard_service,
                                            mock_socketio):
        identity_registry.register('sid-a', 'Alice')
        leaderboard_service.record_outcome('Alice', identity_registry.record_result('sid-a', True))

        with as_client('sid-z'):
            GameInfoHandler().handle_get_leaderboard()

        assert emitted(mock_socketio, 'leaderboard-data', to='sid-z') == [
            [{'username': 'Alice', 'score': 1, 'total': 1, 'accuracy': 100}]
        ]


class TestDisconnect:
    """Test the disconnect handler"""

    def test_disconnect_notifies_human_opponent(self, as_client, human_game, identity_registry, mock_socketio):
        with as_client('sid-a'):
            socket_handlers.handle_disconnect()

        assert not human_game.is_active
        assert human_game.outcome.value == 'unset'
        assert emitted(mock_socketio, 'opponent-disconnected', to='sid-b') == [None]
        assert identity_registry.get_user('sid-a') is None
        assert identity_registry.get_user('sid-b') is not None

    def test_disconnect_while_waiting(self, as_client, identity_registry, matchmaker, fake_timers):
        identity_registry.register('sid-a', 'Alice')
        matchmaker.enqueue('sid-a')

        with as_client('sid-a'):
            socket_handlers.handle_disconnect()

        assert not matchmaker.is_waiting('sid-a')
        assert fake_timers.pending('bot-match') == []

    def test_disconnect_unknown_connection(self, as_client, mock_socketio):
        with as_client('sid-x'):
            socket_handlers.handle_disconnect('client disconnect')

        assert emitted(mock_socketio, 'opponent-disconnected') == []
