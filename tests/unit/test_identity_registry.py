"""
Identity Registry Unit Tests
Tests for connection-to-user mapping and per-username scores.
"""

import random

from src.services.identity_registry import IdentityRegistry, Score


class TestScore:
    """Test Score arithmetic"""

    def test_accuracy_without_games(self):
        assert Score().accuracy == 0

    def test_accuracy_is_rounded_percentage(self):
        assert Score(correct=1, total=3).accuracy == 33
        assert Score(correct=2, total=3).accuracy == 67
        assert Score(correct=5, total=5).accuracy == 100


class TestIdentityRegistry:
    """Test IdentityRegistry functionality"""

    def setup_method(self):
        self.registry = IdentityRegistry(random.Random(0))

    def test_register_with_username(self):
        user = self.registry.register('sid1', 'Alice')

        assert user.id == 'sid1'
        assert user.display_name == 'Alice'
        assert user.score == Score(0, 0)
        assert self.registry.get_user('sid1') is user
        assert self.registry.is_connected('sid1')

    def test_register_without_username_generates_name(self):
        user = self.registry.register('sid1')

        assert user.display_name.startswith('Player')
        number = int(user.display_name[len('Player'):])
        assert 0 <= number <= 9999

    def test_remove(self):
        self.registry.register('sid1', 'Alice')

        removed = self.registry.remove('sid1')

        assert removed.display_name == 'Alice'
        assert not self.registry.is_connected('sid1')
        assert self.registry.remove('sid1') is None

    def test_record_result(self):
        self.registry.register('sid1', 'Alice')

        self.registry.record_result('sid1', True)
        score = self.registry.record_result('sid1', False)

        assert score == Score(correct=1, total=2)
        assert self.registry.get_score('Alice') == Score(correct=1, total=2)

    def test_record_result_for_unknown_connection(self):
        assert self.registry.record_result('ghost', True) is None

    def test_score_survives_reconnect_under_same_name(self):
        self.registry.register('sid1', 'Alice')
        self.registry.record_result('sid1', True)
        self.registry.remove('sid1')

        user = self.registry.register('sid2', 'Alice')

        assert user.score == Score(correct=1, total=1)

    def test_returned_score_is_a_copy(self):
        self.registry.register('sid1', 'Alice')
        snapshot = self.registry.record_result('sid1', True)
        self.registry.record_result('sid1', True)

        assert snapshot == Score(correct=1, total=1)

    def test_counts(self):
        self.registry.register('sid1', 'Alice')
        self.registry.register('sid2', 'Bob')
        self.registry.record_result('sid1', False)

        assert self.registry.connected_count() == 2
        assert self.registry.scored_user_count() == 1

    def test_get_user_data(self):
        self.registry.register('sid1', 'Alice')
        assert self.registry.get_user_data('sid1') == ('Alice', Score(0, 0))
        assert self.registry.get_user_data('ghost') == (None, None)
