"""
Service Container - Dependency Injection Container for AmIaBot
Manages service creation, dependencies, and lifecycle. The container is the
single owner of all game state: queue, sessions, identities and scores.
"""

from typing import Dict, Any, List, Optional, Callable
import inspect
import logging
import random
from enum import Enum

logger = logging.getLogger(__name__)


class ServiceLifecycle(Enum):
    """Service lifecycle management options"""
    SINGLETON = "singleton"  # One instance per container
    TRANSIENT = "transient"  # New instance every time


class ServiceDefinition:
    """Definition of how a service should be created"""
    
    def __init__(
        self, 
        name: str,
        factory: Callable,
        dependencies: List[str] = None,
        lifecycle: ServiceLifecycle = ServiceLifecycle.SINGLETON,
        config: Dict[str, Any] = None
    ):
        self.name = name
        self.factory = factory
        self.dependencies = dependencies or []
        self.lifecycle = lifecycle
        self.config = config or {}


class CircularDependencyError(Exception):
    """Raised when circular dependency is detected"""
    pass


class ServiceNotFoundError(Exception):
    """Raised when requested service is not registered"""
    pass


class ServiceContainer:
    """
    Dependency Injection Container for managing services and their dependencies.
    
    Features:
    - Automatic dependency resolution
    - Circular dependency detection
    - Singleton and transient lifecycle management
    - Configuration injection
    - Service discovery and validation
    """
    
    def __init__(self):
        self._services: Dict[str, ServiceDefinition] = {}
        self._instances: Dict[str, Any] = {}
        self._creating: set = set()  # Track services being created (circular detection)
        self._config: Dict[str, Any] = {}
    
    def register(
        self,
        name: str,
        factory: Callable,
        dependencies: List[str] = None,
        lifecycle: ServiceLifecycle = ServiceLifecycle.SINGLETON,
        config: Dict[str, Any] = None
    ) -> 'ServiceContainer':
        """
        Register a service with the container.
        
        Args:
            name: Service name for retrieval
            factory: Class or function to create the service
            dependencies: List of service names this service depends on
            lifecycle: How the service instance should be managed
            config: Additional configuration for the service
            
        Returns:
            Self for method chaining
        """
        if name in self._services:
            raise ValueError(f"Service '{name}' is already registered")
        
        # Validate factory is callable
        if not callable(factory):
            raise ValueError(f"Factory for '{name}' must be callable")
        
        # Auto-detect dependencies from constructor signature if not provided
        if dependencies is None:
            dependencies = self._auto_detect_dependencies(factory)
        
        service_def = ServiceDefinition(
            name=name,
            factory=factory,
            dependencies=dependencies,
            lifecycle=lifecycle,
            config=config
        )
        
        self._services[name] = service_def
        return self
    
    def _auto_detect_dependencies(self, factory: Callable) -> List[str]:
        """
        Auto-detect dependencies from constructor signature.
        Disabled: constructors also take plain values (rng, settings), so
        dependencies are always listed explicitly at registration.
        """
        return []
    
    def configure_services(self) -> 'ServiceContainer':
        """
        Register all AmIaBot services with their dependencies.
        This method contains the service configuration for the application.
        """
        from src.config.game_settings import create_game_settings
        from src.persona_manager import create_persona_manager
        from src.game_manager import GameManager
        from src.services.identity_registry import IdentityRegistry
        from src.services.timer_service import TimerService
        from src.services.concurrency_control_service import ConcurrencyControlService
        from src.services.fallback_response_service import FallbackResponseService
        from src.services.completion_service import create_completion_service
        from src.services.broadcast_service import BroadcastService
        from src.services.leaderboard_service import LeaderboardService
        from src.services.responder_adapter import (
            HumanResponderAdapter, BotResponderAdapter, ResponderFactory
        )
        from src.services.matchmaker import Matchmaker
        from src.services.scoring_service import ScoringService
        from src.services.validation_service import ValidationService
        from src.services.error_response_factory import ErrorResponseFactory
        from src.services.rate_limit_service import create_event_queue_manager

        config = self._config

        # Leaves - no dependencies
        self.register('RandomSource', create_random_source,
                      config=_pick(config, 'random_seed'))
        self.register('GameSettings', create_game_settings, config=dict(config))
        self.register('TimerService', TimerService)
        self.register('ConcurrencyControlService', ConcurrencyControlService)
        self.register('ErrorResponseFactory', ErrorResponseFactory)
        self.register('CompletionService', create_completion_service, config=_pick(
            config, 'openai_api_key', 'openai_model', 'openai_base_url',
            'completion_timeout_seconds', 'completion_temperature', 'completion_max_tokens'))
        self.register('EventQueueManager', create_event_queue_manager, config=_pick(
            config, 'max_events_per_second', 'max_events_per_minute', 'rate_limit_block_seconds'))

        # Randomness and settings consumers
        self.register('IdentityRegistry', IdentityRegistry, dependencies=['RandomSource'])
        self.register('PersonaManager', create_persona_manager, dependencies=['RandomSource'],
                      config={'yaml_file_path': config['personas_file']} if 'personas_file' in config else None)
        self.register('FallbackResponseService', FallbackResponseService, dependencies=['RandomSource'])
        self.register('LeaderboardService', LeaderboardService, dependencies=['GameSettings'])
        self.register('ValidationService', ValidationService, dependencies=['GameSettings'])

        # Broadcast service - socketio is injected as an external dependency
        self.register('BroadcastService', BroadcastService, dependencies=['socketio'])

        self.register('GameManager', GameManager, dependencies=[
            'IdentityRegistry', 'BroadcastService', 'TimerService', 'PersonaManager',
            'ConcurrencyControlService', 'RandomSource', 'GameSettings'
        ])

        self.register('HumanResponderAdapter', HumanResponderAdapter,
                      dependencies=['GameManager', 'BroadcastService'])
        self.register('BotResponderAdapter', BotResponderAdapter, dependencies=[
            'GameManager', 'BroadcastService', 'TimerService', 'CompletionService',
            'FallbackResponseService', 'RandomSource', 'GameSettings'
        ])
        self.register('ResponderFactory', ResponderFactory,
                      dependencies=['HumanResponderAdapter', 'BotResponderAdapter'])

        self.register('Matchmaker', Matchmaker, dependencies=[
            'IdentityRegistry', 'GameManager', 'ResponderFactory', 'BroadcastService',
            'TimerService', 'RandomSource', 'GameSettings'
        ])
        self.register('ScoringService', ScoringService,
                      dependencies=['IdentityRegistry', 'LeaderboardService'])

        return self

    def set_external_dependency(self, name: str, instance: Any) -> 'ServiceContainer':
        """
        Set an external dependency that's created outside the container.
        Useful for Flask-SocketIO and similar framework objects.
        """
        self._instances[name] = instance
        return self
    
    def set_config(self, config: Dict[str, Any]) -> 'ServiceContainer':
        """Set global configuration for the container"""
        self._config.update(config)
        return self
    
    def get(self, name: str) -> Any:
        """
        Get a service instance, creating it if necessary.
        
        Args:
            name: Service name to retrieve
            
        Returns:
            Service instance
            
        Raises:
            ServiceNotFoundError: If service is not registered
            CircularDependencyError: If circular dependency detected
        """
        # Check for external dependency first
        if name in self._instances:
            return self._instances[name]
        
        if name not in self._services:
            raise ServiceNotFoundError(f"Service '{name}' is not registered")
        
        service_def = self._services[name]
        
        # Check for singleton instance
        if service_def.lifecycle == ServiceLifecycle.SINGLETON and name in self._instances:
            return self._instances[name]
        
        # Create new instance
        return self._create_service(name)
    
    def _create_service(self, name: str) -> Any:
        """
        Create a service instance with dependency injection.
        """
        if name in self._creating:
            cycle = ' -> '.join(list(self._creating) + [name])
            raise CircularDependencyError(f"Circular dependency detected: {cycle}")
        
        if name in self._instances:
            return self._instances[name]
        
        self._creating.add(name)
        
        try:
            service_def = self._services[name]
            
            # Resolve dependencies
            dependencies = []
            for dep_name in service_def.dependencies:
                dep_instance = self.get(dep_name)
                dependencies.append(dep_instance)
            
            # Create service instance
            if inspect.isclass(service_def.factory):
                # Constructor call
                if service_def.dependencies:
                    instance = service_def.factory(*dependencies)
                else:
                    instance = service_def.factory()
            else:
                # Function call
                instance = service_def.factory(*dependencies, **service_def.config)
            
            # Store singleton instances
            if service_def.lifecycle == ServiceLifecycle.SINGLETON:
                self._instances[name] = instance
            
            return instance
            
        finally:
            self._creating.discard(name)
    
    def has_service(self, name: str) -> bool:
        """Check if a service is registered"""
        return name in self._services
    
    def get_service_names(self) -> List[str]:
        """Get list of all registered service names"""
        return list(self._services.keys())
    
    def validate_dependencies(self) -> Dict[str, List[str]]:
        """
        Validate all service dependencies can be resolved.
        
        Returns:
            Dictionary mapping service names to lists of missing dependencies
        """
        issues = {}
        
        for name, service_def in self._services.items():
            missing_deps = []
            for dep in service_def.dependencies:
                if not self.has_service(dep) and dep not in self._instances:
                    missing_deps.append(dep)
            
            if missing_deps:
                issues[name] = missing_deps
        
        return issues
    
    def clear(self) -> 'ServiceContainer':
        """Clear all services and instances (useful for testing)"""
        self._services.clear()
        self._instances.clear()
        self._creating.clear()
        self._config.clear()
        return self
    
    def get_dependency_graph(self) -> Dict[str, List[str]]:
        """Get the dependency graph for visualization/debugging"""
        return {name: service_def.dependencies for name, service_def in self._services.items()}
    
    def __repr__(self) -> str:
        return f"ServiceContainer(services={len(self._services)}, instances={len(self._instances)})"


def _pick(config: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    """Subset of configuration passed as keyword arguments to a factory function"""
    return {key: config[key] for key in keys if key in config}


def create_random_source(random_seed: Optional[int] = None) -> random.Random:
    """Shared random source; seeding it makes matchmaking, roles and bot replies reproducible"""
    if random_seed is not None:
        logger.info(f"Seeding random source with {random_seed}")
    return random.Random(random_seed)


# Global container instance for the application
_app_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """Get the global application service container"""
    global _app_container
    if _app_container is None:
        _app_container = ServiceContainer()
    return _app_container


def configure_container(socketio=None, config=None) -> ServiceContainer:
    """
    Configure the global service container with AmIaBot services.

    The same container object is reused so references held by registered
    handlers stay valid across reconfiguration.

    Args:
        socketio: Flask-SocketIO instance
        config: Application configuration dictionary

    Returns:
        Configured service container
    """
    container = reset_container()

    if socketio is not None:
        container.set_external_dependency('socketio', socketio)

    if config is not None:
        container.set_config(config)

    container.configure_services()

    return container


def reset_container() -> ServiceContainer:
    """Drop every service and instance from the global container (for testing)"""
    container = get_container()
    for name in ('Matchmaker', 'GameManager'):
        if name in container._instances:
            container._instances[name].shutdown()
    return container.clear()
