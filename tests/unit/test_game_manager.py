"""
Game Manager Unit Tests

Tests for session creation, lookup, guess submission, abandonment and the
game duration timer. Runs against the container with a mock SocketIO and
manually fired timers.
"""

import pytest

from src.core.game_types import Guess, Outcome, Role
from tests.helpers.socket_mocks import emitted


@pytest.fixture
def players(identity_registry):
    identity_registry.register('sid-a', 'Alice')
    identity_registry.register('sid-b', 'Bob')
    return 'sid-a', 'sid-b'


class TestSessionCreation:
    """Test creating human and bot sessions"""

    def test_human_session_emits_game_started_to_both(self, game_manager, players, mock_socketio):
        session = game_manager.create_human_session(*players)

        assert session is not None
        assert not session.is_bot_opponent
        assert {session.detective.connection_id, session.responder.connection_id} == set(players)

        for sid in players:
            payloads = emitted(mock_socketio, 'game-started', to=sid)
            assert len(payloads) == 1
            assert payloads[0]['opponentKind'] == 'human'
            assert payloads[0]['gameId'] == session.id
            assert payloads[0]['role'] == session.role_of(sid).value

    def test_human_roles_are_random(self, game_manager, identity_registry):
        detectives = set()
        for i in range(20):
            identity_registry.register(f'a{i}', 'A')
            identity_registry.register(f'b{i}', 'B')
            session = game_manager.create_human_session(f'a{i}', f'b{i}')
            detectives.add(session.detective.display_name)
        assert detectives == {'A', 'B'}

    def test_human_session_with_gone_connection(self, game_manager, identity_registry):
        identity_registry.register('sid-a', 'Alice')
        assert game_manager.create_human_session('sid-a', 'ghost') is None
        assert game_manager.active_session_count() == 0

    def test_bot_session(self, game_manager, players, mock_socketio):
        session = game_manager.create_bot_session('sid-a')

        assert session.is_bot_opponent
        assert session.detective.connection_id == 'sid-a'
        assert session.responder.connection_id == f'ai_{session.id}'
        assert session.persona is not None
        assert emitted(mock_socketio, 'game-started', to='sid-a') == [{
            'role': 'detective', 'opponentKind': 'unknown', 'gameId': session.id
        }]

    def test_bot_session_for_gone_connection(self, game_manager):
        assert game_manager.create_bot_session('ghost') is None

    def test_sessions_get_duration_timer(self, game_manager, players, fake_timers):
        session = game_manager.create_bot_session('sid-a')

        timers = fake_timers.pending(f'time-up:{session.id}')
        assert len(timers) == 1
        assert timers[0].delay_ms == 180000


class TestLookup:
    """Test session lookup by connection"""

    def test_find_by_connection(self, game_manager, players):
        session = game_manager.create_human_session(*players)

        assert game_manager.find_session_by_connection('sid-a') is session
        assert game_manager.find_session_by_connection('sid-b') is session
        assert game_manager.find_session_by_connection('sid-c') is None
        assert game_manager.has_active_session('sid-a')
        assert game_manager.get_session(session.id) is session
        assert game_manager.active_session_count() == 1
        assert game_manager.get_active_sessions() == [session]

    def test_bot_connection_id_is_not_indexed(self, game_manager, players):
        session = game_manager.create_bot_session('sid-a')
        assert game_manager.find_session_by_connection(session.responder.connection_id) is None


class TestSubmitGuess:
    """Test guess adjudication through the manager"""

    def test_first_guess_ends_and_retires_session(self, game_manager, players, fake_timers):
        session = game_manager.create_bot_session('sid-a')

        outcome = game_manager.submit_guess(session, Guess.BOT)

        assert outcome == Outcome.DETECTIVE_CORRECT
        assert not session.is_active
        assert game_manager.active_session_count() == 0
        assert game_manager.find_session_by_connection('sid-a') is None
        assert fake_timers.pending(f'time-up:{session.id}') == []

    def test_second_guess_returns_none(self, game_manager, players):
        session = game_manager.create_bot_session('sid-a')
        game_manager.submit_guess(session, Guess.BOT)

        assert game_manager.submit_guess(session, Guess.HUMAN) is None
        assert session.outcome == Outcome.DETECTIVE_CORRECT

    def test_append_message_after_guess(self, game_manager, players):
        session = game_manager.create_human_session(*players)
        assert game_manager.append_message(session, Role.DETECTIVE, 'hi') is not None
        game_manager.submit_guess(session, Guess.HUMAN)

        assert game_manager.append_message(session, Role.RESPONDER, 'late') is None
        assert len(game_manager.transcript_snapshot(session)) == 1

    def test_session_lock_released_for_good(self, container, game_manager, players):
        concurrency_control = container.get('ConcurrencyControlService')
        session = game_manager.create_human_session(*players)
        assert concurrency_control.find_session_lock(session.id) is not None

        game_manager.submit_guess(session, Guess.HUMAN)
        # Late operations on the retired session
        game_manager.append_message(session, Role.RESPONDER, 'late')
        game_manager.transcript_snapshot(session)
        game_manager.submit_guess(session, Guess.BOT)

        assert concurrency_control.lock_count() == 0


class TestAbandon:
    """Test disconnect-driven session end"""

    def test_abandon_session_for(self, game_manager, players, fake_timers):
        session = game_manager.create_human_session(*players)

        abandoned = game_manager.abandon_session_for('sid-b')

        assert abandoned is session
        assert session.outcome == Outcome.UNSET
        assert game_manager.active_session_count() == 0
        assert fake_timers.pending() == []

    def test_abandon_without_session(self, game_manager):
        assert game_manager.abandon_session_for('nobody') is None

    def test_guess_after_abandon_is_ignored(self, game_manager, players):
        session = game_manager.create_human_session(*players)
        game_manager.abandon_session_for('sid-a')

        assert game_manager.submit_guess(session, Guess.HUMAN) is None
        assert session.outcome == Outcome.UNSET


class TestTimeUpAndEarlyEnd:
    """Test the duration timer and early end requests"""

    def test_time_up_notifies_humans_without_ending(self, game_manager, players, fake_timers, mock_socketio):
        session = game_manager.create_human_session(*players)

        fake_timers.fire_pending('time-up')

        assert session.is_active
        assert len(emitted(mock_socketio, 'time-up', to='sid-a')) == 1
        assert len(emitted(mock_socketio, 'time-up', to='sid-b')) == 1

    def test_time_up_after_end_is_silent(self, game_manager, players, fake_timers, mock_socketio):
        session = game_manager.create_bot_session('sid-a')
        handle = fake_timers.pending('time-up')[0]
        game_manager.submit_guess(session, Guess.BOT)

        # Simulate a timer that slipped past cancellation
        handle.cancelled = False
        handle.fire()

        assert emitted(mock_socketio, 'time-up') == []

    def test_request_early_end_only_signals_requester(self, game_manager, players, mock_socketio):
        session = game_manager.create_human_session(*players)

        assert game_manager.request_early_end('sid-a') is True

        assert len(emitted(mock_socketio, 'proceed-to-guess', to='sid-a')) == 1
        assert emitted(mock_socketio, 'proceed-to-guess', to='sid-b') == []
        assert session.is_active

    def test_request_early_end_without_session(self, game_manager):
        assert game_manager.request_early_end('nobody') is False

    def test_attach_timer_to_ended_session_cancels_it(self, game_manager, players, fake_timers):
        session = game_manager.create_bot_session('sid-a')
        game_manager.submit_guess(session, Guess.BOT)
        handle = fake_timers.schedule(1000, lambda: None, name='late')

        assert game_manager.attach_timer(session, handle) is False
        assert handle.cancelled

    def test_shutdown_cancels_all_timers(self, game_manager, players, fake_timers):
        game_manager.create_human_session(*players)
        game_manager.shutdown()
        assert fake_timers.pending() == []
