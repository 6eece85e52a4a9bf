#!/usr/bin/env python3
"""
Run AmIaBot locally under Gunicorn with auto-reload.
Uses the same gunicorn.conf.py as production, so persona validation and the
eventlet worker behave identically.
"""

import os
import subprocess
import sys

from config_factory import load_config


def main():
    os.environ.setdefault('FLASK_ENV', 'development')
    config = load_config()

    cmd = [
        'gunicorn',
        '--config', 'gunicorn.conf.py',
        '--reload',
        '--log-level', config.log_level.lower(),
        'wsgi:app'
    ]

    print(f"AmIaBot dev server on http://{config.host}:{config.port} (Ctrl+C to stop)")
    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        pass
    except subprocess.CalledProcessError as e:
        sys.exit(e.returncode)


if __name__ == '__main__':
    main()
