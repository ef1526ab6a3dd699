"""
Flask application factory module.

Provides the ``create_app`` factory that assembles the taskboard client.
The client is a server-rendered front end for a remote task API: it keeps
each browser's state (session, task list, open editor) in memory, renders
it with Jinja templates, and turns every form submission into one call to
the remote API followed by a local state update.

Key Concepts Demonstrated:
- Application factory pattern (``create_app``)
- Blueprint-based route registration
- In-memory per-browser workspaces instead of ambient global state
"""

from __future__ import annotations

import logging

from flask import Flask

from config import get_config

from .components.task_list import format_due_date, priority_color, status_color
from .workspace import WorkspaceRegistry

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

WORKSPACES_EXTENSION = "taskboard.workspaces"


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the taskboard application.

    Args:
        config_name: Configuration environment name
            (``"development"``, ``"testing"``, ``"production"``).  When
            *None*, the value is read from the ``FLASK_ENV`` environment
            variable, defaulting to ``"development"``.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__, instance_relative_config=True)

    config_class = get_config(config_name)
    app.config.from_object(config_class)

    logger.info("Creating taskboard app with config: %s", config_class.__name__)

    app.extensions[WORKSPACES_EXTENSION] = WorkspaceRegistry(
        idle_seconds=app.config["WORKSPACE_IDLE_SECONDS"]
    )

    app.add_template_filter(status_color, "status_color")
    app.add_template_filter(priority_color, "priority_color")
    app.add_template_filter(
        lambda value: format_due_date(value, app.config["DATE_DISPLAY_FORMAT"]),
        "due_date",
    )

    # Import inside the factory to avoid circular imports -- the blueprint
    # module references helpers from this package, which must exist first.
    from .routes.views import views_bp

    app.register_blueprint(views_bp)
    return app
