"""
Fallback Response Service Unit Tests
"""

import random

import pytest

from src.services.fallback_response_service import (
    FallbackResponseService, GENERIC_RESPONSES, QUESTION_RESPONSES
)


class TestFallbackResponseService:
    """Test canned reply selection"""

    def setup_method(self):
        self.service = FallbackResponseService(random.Random(42))

    def test_pool_sizes(self):
        assert len(GENERIC_RESPONSES) == 10
        assert len(QUESTION_RESPONSES) == 4

    def test_statement_uses_generic_pool(self):
        assert self.service.get_pool('I like tea.') == list(GENERIC_RESPONSES)

    def test_question_extends_pool(self):
        pool = self.service.get_pool('Do you like tea?')
        assert len(pool) == 14
        assert set(QUESTION_RESPONSES) <= set(pool)

    @pytest.mark.parametrize('message', ['', None, 42, ['?'], {'text': '?'}, 'what?', 'x' * 1000])
    def test_never_raises_and_never_empty(self, message):
        reply = self.service.generate(message)
        assert isinstance(reply, str)
        assert reply.strip()

    def test_non_string_input_uses_generic_pool(self):
        for _ in range(50):
            assert self.service.generate(['?']) in GENERIC_RESPONSES

    def test_seeded_selection_is_reproducible(self):
        first = FallbackResponseService(random.Random(3))
        second = FallbackResponseService(random.Random(3))
        assert [first.generate('hi?') for _ in range(20)] == [second.generate('hi?') for _ in range(20)]
