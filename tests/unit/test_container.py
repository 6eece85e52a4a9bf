"""
Service Container Unit Tests
Tests for dependency injection, lifecycle management and the global container.
"""

import random

import pytest
from unittest.mock import Mock

from container import (
    ServiceContainer, ServiceLifecycle, CircularDependencyError, ServiceNotFoundError,
    configure_container, create_random_source, get_container, reset_container
)


class TestServiceContainer:
    """Test ServiceContainer core behavior"""

    def setup_method(self):
        self.container = ServiceContainer()

    def test_class_factory_gets_dependencies_positionally(self):
        class Engine:
            pass

        class Car:
            def __init__(self, engine):
                self.engine = engine

        self.container.register('Engine', Engine)
        self.container.register('Car', Car, dependencies=['Engine'])

        car = self.container.get('Car')

        assert car.engine is self.container.get('Engine')

    def test_function_factory_gets_config(self):
        def create_thing(size=1):
            return {'size': size}

        self.container.register('Thing', create_thing, config={'size': 3})

        assert self.container.get('Thing') == {'size': 3}

    def test_singleton_vs_transient(self):
        self.container.register('Single', object)
        self.container.register('Many', object, lifecycle=ServiceLifecycle.TRANSIENT)

        assert self.container.get('Single') is self.container.get('Single')
        assert self.container.get('Many') is not self.container.get('Many')

    def test_duplicate_registration(self):
        self.container.register('A', object)
        with pytest.raises(ValueError, match="already registered"):
            self.container.register('A', object)

    def test_non_callable_factory(self):
        with pytest.raises(ValueError, match="must be callable"):
            self.container.register('A', 42)

    def test_unknown_service(self):
        with pytest.raises(ServiceNotFoundError):
            self.container.get('Nope')

    def test_circular_dependency(self):
        self.container.register('A', lambda b: b, dependencies=['B'])
        self.container.register('B', lambda a: a, dependencies=['A'])

        with pytest.raises(CircularDependencyError):
            self.container.get('A')

    def test_external_dependency_overrides_registration(self):
        self.container.register('Clock', object)
        clock = Mock()

        self.container.set_external_dependency('Clock', clock)

        assert self.container.get('Clock') is clock

    def test_validate_dependencies(self):
        self.container.register('A', lambda b, c: None, dependencies=['B', 'C'])
        self.container.register('B', object)

        assert self.container.validate_dependencies() == {'A': ['C']}

    def test_introspection(self):
        self.container.register('A', object)
        self.container.register('B', lambda a: a, dependencies=['A'])

        assert self.container.has_service('A')
        assert not self.container.has_service('C')
        assert self.container.get_service_names() == ['A', 'B']
        assert self.container.get_dependency_graph() == {'A': [], 'B': ['A']}
        assert repr(self.container) == 'ServiceContainer(services=2, instances=0)'

    def test_clear(self):
        self.container.register('A', object)
        self.container.get('A')

        self.container.clear()

        assert self.container.get_service_names() == []
        assert repr(self.container) == 'ServiceContainer(services=0, instances=0)'


class TestApplicationContainer:
    """Test the global AmIaBot container wiring"""

    def test_all_dependencies_resolvable(self):
        container = configure_container(socketio=Mock(), config={})
        assert container.validate_dependencies() == {}

    def test_every_service_builds(self):
        container = configure_container(socketio=Mock(), config={'random_seed': 7})

        for name in container.get_service_names():
            assert container.get(name) is not None

    def test_config_reaches_services(self):
        container = configure_container(socketio=Mock(), config={
            'human_match_probability': 0.9,
            'leaderboard_size': 5,
            'leaderboard_broadcast_size': 5,
            'api_leaderboard_size': 5
        })

        assert container.get('GameSettings').human_match_probability == 0.9
        assert container.get('LeaderboardService').max_entries == 5
        assert container.get('Matchmaker').game_settings.human_match_probability == 0.9

    def test_shared_singletons(self):
        container = configure_container(socketio=Mock(), config={})

        registry = container.get('IdentityRegistry')
        assert container.get('GameManager').identity_registry is registry
        assert container.get('Matchmaker').identity_registry is registry
        assert container.get('Matchmaker').rng is container.get('RandomSource')

    def test_reconfigure_keeps_container_object(self):
        first = configure_container(socketio=Mock(), config={})
        second = configure_container(socketio=Mock(), config={})

        assert first is second is get_container()

    def test_reset_shuts_down_waiting_entries(self, fake_timers):
        container = get_container()
        container.set_external_dependency('socketio', Mock())
        container.get('IdentityRegistry').register('sid-a', 'Alice')
        container.get('Matchmaker').enqueue('sid-a')
        timer = fake_timers.pending('bot-match')[0]

        reset_container()

        assert timer.cancelled
        assert container.get_service_names() == []

    def test_seeded_random_source(self):
        assert create_random_source(5).random() == random.Random(5).random()
        assert isinstance(create_random_source(), random.Random)
