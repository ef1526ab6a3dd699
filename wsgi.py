"""WSGI entry point for the taskboard client."""

import os

from taskboard import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
