"""
Gunicorn configuration for AmIaBot application.
Optimized for Socket.IO with eventlet workers.
"""

import sys
import logging
import yaml
from src.persona_manager import PersonaManager, ContentValidationError


def on_starting(server):
    """
    Server hook that runs when the master process is starting.
    We use this to validate the personas YAML file before workers are forked.
    If validation fails, we exit, preventing the server from starting.
    """
    logger = logging.getLogger(__name__)
    logger.info(f"Validating {app_config.personas_file} before starting workers...")
    try:
        persona_manager = PersonaManager(app_config.personas_file)
        persona_manager.load_personas_from_yaml()
        logger.info(f"Successfully validated and loaded {persona_manager.get_persona_count()} personas.")
    except (FileNotFoundError, yaml.YAMLError, ContentValidationError) as e:
        logger.critical(f"FATAL: Persona file validation failed. Server shutting down. Error: {e}")
        sys.exit(1)


from config_factory import load_config

# Load configuration (renamed to avoid conflicts with gunicorn's internal 'config')
app_config = load_config()

# Server socket
bind = f"{app_config.host}:{app_config.port}"
backlog = 2048

# Worker processes
workers = 1  # Game state lives in process memory
worker_class = "eventlet"
worker_connections = app_config.worker_connections
timeout = app_config.timeout
keepalive = app_config.keepalive

max_requests = 2000
max_requests_jitter = 100

# Logging
accesslog = "-"
errorlog = "-"
loglevel = app_config.log_level
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'

# Process naming
proc_name = "amiabot"

# Server mechanics
preload_app = False  # Don't preload for Socket.IO
daemon = False
pidfile = None
user = None
group = None
tmp_upload_dir = None
