"""
AmIaBot - A real-time chat game where players try to tell humans from bots.
Main Flask application entry point focusing on app creation, dependency injection, and service wiring.
"""

from flask import Flask
from flask_socketio import SocketIO
import os
import logging
import atexit
import sys
import yaml

from src.persona_manager import ContentValidationError
from container import configure_container
from config_factory import load_config, ConfigurationFactory
from src.services.rate_limit_service import set_event_queue_manager

# Initialize Flask app
app = Flask(__name__)

# Load and apply configuration
app_config = load_config()
config_factory = ConfigurationFactory()
app.config.update(config_factory.get_flask_config())

# Initialize Socket.IO with environment-aware CORS
# In production, restrict to explicitly allowed origins from env var SOCKETIO_CORS_ALLOWED_ORIGINS (comma-separated)
allowed_origins_env = os.environ.get('SOCKETIO_CORS_ALLOWED_ORIGINS', '')
if app_config.is_production:
    _cors_allowed = [o.strip() for o in allowed_origins_env.split(',') if o.strip()]
    socketio = SocketIO(app, cors_allowed_origins=_cors_allowed or [], async_mode='eventlet')
else:
    socketio = SocketIO(app, cors_allowed_origins="*", async_mode='eventlet')

# Configure logging
logging.basicConfig(level=getattr(logging, app_config.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# Configure service container with dependencies
container = configure_container(socketio=socketio, config=config_factory.to_dict())

# Initialize rate limiting
set_event_queue_manager(container.get('EventQueueManager'))

# Load personas on startup
try:
    persona_manager = container.get('PersonaManager')
    logger.info(f"Loaded {persona_manager.get_persona_count()} personas from YAML")
except (FileNotFoundError, yaml.YAMLError, ContentValidationError) as e:
    logger.critical(f"FATAL: Persona file validation failed, bot games cannot run. Server shutting down. Error: {e}")
    sys.exit(1)

if not app_config.completion_configured:
    logger.warning("OPENAI_API_KEY not set: bots will use canned replies and /api/chat is unavailable")

# Register REST endpoints
from src.routes.api import create_api_blueprint
app.register_blueprint(create_api_blueprint(container))

# Register Socket.IO handlers
from src.handlers.socket_handlers import register_socket_handlers
register_socket_handlers(socketio)


def cleanup_on_exit():
    """Cancel pending timers on application exit."""
    logger.info("Shutting down AmIaBot server...")
    for name in ('Matchmaker', 'GameManager'):
        if container.has_service(name):
            container.get(name).shutdown()


atexit.register(cleanup_on_exit)

if __name__ == '__main__':
    logger.info(f"Starting AmIaBot server on {app_config.host}:{app_config.port}")
    try:
        socketio.run(app, host=app_config.host, port=app_config.port, debug=app_config.debug)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
