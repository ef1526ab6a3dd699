"""
HTML view routes for the taskboard client.

Maps every form submission from the browser onto one operation of the
browser's workspace components and renders the result.  The module is
organised into three logical sections:

1. **Helper functions** -- workspace lookup, the ``login_required``
   decorator, and the shared dashboard renderer.
2. **Session routes** -- login/registration through the session gate, and
   logout.
3. **Dashboard routes** -- task list, editor, delete confirmation and
   quick status change, all delegated to the task list controller.

Key Concepts Demonstrated:
- Thin views over stateful components
- Decorator-based access control (``login_required``)
- Session expiry handled in one place
- Flash-message feedback for form submissions
"""

from __future__ import annotations

import logging
from functools import wraps

from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    g,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from .. import WORKSPACES_EXTENSION
from ..api_client import LOGIN_MODE, REGISTER_MODE, SessionExpiredError, TaskApiClient
from ..components import RequestInFlightError, TaskNotFoundError
from ..models import TaskPriority, TaskStatus
from ..workspace import Workspace, WorkspaceRegistry

logger = logging.getLogger(__name__)

views_bp = Blueprint("views", __name__)

WORKSPACE_KEY = "workspace_id"


# =====================================================================
# Helper Functions
# =====================================================================


def _registry() -> WorkspaceRegistry:
    return current_app.extensions[WORKSPACES_EXTENSION]


def _current_workspace(create: bool = False) -> Workspace | None:
    """
    Return the workspace bound to this browser's session cookie.

    Args:
        create: When True, a missing or pruned workspace is replaced by a
            fresh one and its id stored in the cookie.

    Returns:
        The workspace, or ``None`` when there is none and *create* is
        False.
    """
    registry = _registry()
    workspace = registry.get(session.get(WORKSPACE_KEY))
    if workspace is None and create:
        workspace = Workspace(
            TaskApiClient.from_config(current_app.config),
            public_key=current_app.config.get("JWT_PUBLIC_KEY"),
            leeway=int(current_app.config.get("JWT_CLOCK_SKEW_SECONDS", 30)),
        )
        session[WORKSPACE_KEY] = registry.add(workspace)
    return workspace


def _end_session(message: str, category: str = "success"):
    """Discard the browser's workspace and redirect to the login page."""
    _registry().discard(session.pop(WORKSPACE_KEY, None))
    flash(message, category)
    return redirect(url_for("views.login"))


def _render_dashboard(status_code: int = 200):
    """
    Render the dashboard with the standard template context.

    Returns:
        A ``(body, status_code)`` tuple suitable for returning from a
        Flask view function.
    """
    dashboard = g.workspace.dashboard
    return (
        render_template(
            "dashboard.html",
            dashboard=dashboard,
            editor=dashboard.editor,
            statuses=TaskStatus,
            priorities=TaskPriority,
            current_username=dashboard.session.username,
        ),
        status_code,
    )


def login_required(view_func):
    """
    Decorator that requires an authenticated workspace.

    On success the workspace is stashed on Flask's ``g`` object.  An
    expired session, or a 401 from the task API while the view runs,
    discards the workspace and redirects to the login page.  A duplicate
    submission of an action still in flight is refused with a flash
    message, and an unknown task id aborts with 404.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        workspace = _current_workspace()
        if workspace is None or workspace.dashboard is None:
            return redirect(url_for("views.login"))
        if not workspace.authenticated:
            return _end_session("Session expired. Please log in again.", "error")

        g.workspace = workspace
        try:
            return view_func(*args, **kwargs)
        except SessionExpiredError:
            logger.info("Task API rejected the session for %r", workspace.session.username)
            return _end_session("Session expired. Please log in again.", "error")
        except RequestInFlightError:
            flash("That request is already in progress.", "error")
            return redirect(url_for("views.index"))
        except TaskNotFoundError:
            abort(404)

    return wrapper


# =====================================================================
# Session Routes
# =====================================================================


@views_bp.route("/health", methods=["GET"])
def health_check():
    """
    Return service health status.

    This endpoint is public (no authentication required) and is intended
    for load-balancer and orchestrator liveness probes.
    """
    return {"status": "healthy", "service": "taskboard"}, 200


def _render_gate(workspace: Workspace, status_code: int = 200):
    return render_template("login.html", gate=workspace.gate), status_code


@views_bp.route("/login", methods=["GET"])
def login():
    """
    Render the session gate in its current mode.

    Already-authenticated users are redirected to the dashboard.
    """
    workspace = _current_workspace(create=True)
    if workspace.authenticated:
        return redirect(url_for("views.index"))
    return _render_gate(workspace)


@views_bp.route("/register", methods=["GET"])
def register():
    """Render the session gate switched to registration."""
    workspace = _current_workspace(create=True)
    if workspace.authenticated:
        return redirect(url_for("views.index"))
    workspace.gate.set_mode(REGISTER_MODE)
    return _render_gate(workspace)


@views_bp.route("/login/mode", methods=["POST"])
def toggle_mode():
    """
    Switch the gate between login and register.

    Values already typed into the form are kept; the error is cleared.
    """
    workspace = _current_workspace(create=True)
    workspace.gate.update(request.form)
    workspace.gate.toggle_mode()
    return redirect(url_for("views.login"))


@views_bp.route("/login", methods=["POST"])
def login_submit():
    """
    Handle the session gate form (login or registration).

    On success the workspace holds a new session and the user lands on
    the dashboard.  On failure the gate is re-rendered with its error and
    the submitted values.
    """
    workspace = _current_workspace(create=True)
    if workspace.authenticated:
        return redirect(url_for("views.index"))

    gate = workspace.gate
    gate.update(request.form)
    try:
        result = gate.submit(workspace.sign_in)
    except RequestInFlightError:
        flash("That request is already in progress.", "error")
        return _render_gate(workspace, 409)

    if result is None:
        return _render_gate(workspace, 400)

    flash(
        "Logged in successfully." if gate.mode == LOGIN_MODE else "Registration successful.",
        "success",
    )
    return redirect(url_for("views.index"))


@views_bp.route("/logout", methods=["POST"])
def logout():
    """Release the session and discard all state derived from it."""
    return _end_session("Logged out. Session cleared.")


# =====================================================================
# Dashboard Routes
# =====================================================================


@views_bp.route("/")
@login_required
def index():
    """
    Render the dashboard.

    The task collection is fetched on the first render only; later
    renders show the local collection as reconciled so far.
    """
    g.workspace.dashboard.mount()
    return _render_dashboard()


@views_bp.route("/notice/dismiss", methods=["POST"])
@login_required
def dismiss_notice():
    g.workspace.dashboard.dismiss_notice()
    return redirect(url_for("views.index"))


@views_bp.route("/tasks/new", methods=["POST"])
@login_required
def new_task():
    """Open the editor in create mode."""
    g.workspace.dashboard.open_create()
    return redirect(url_for("views.index"))


@views_bp.route("/tasks/<task_id>/edit", methods=["POST"])
@login_required
def edit_task(task_id: str):
    """Open the editor in edit mode for *task_id*."""
    g.workspace.dashboard.open_edit(task_id)
    return redirect(url_for("views.index"))


@views_bp.route("/editor/submit", methods=["POST"])
@login_required
def submit_editor():
    """
    Submit the open editor.

    On success the editor closes and the collection shows the server's
    record.  On failure the editor stays open with its inline error.
    """
    dashboard = g.workspace.dashboard
    editor = dashboard.editor
    if editor is None:
        return redirect(url_for("views.index"))

    creating = editor.task is None
    if dashboard.submit_editor(request.form) is None:
        return _render_dashboard(400)

    flash("Task created successfully" if creating else "Task updated successfully", "success")
    return redirect(url_for("views.index"))


@views_bp.route("/editor/cancel", methods=["POST"])
@login_required
def cancel_editor():
    """Close the editor without saving; no API call is made."""
    g.workspace.dashboard.close_editor()
    return redirect(url_for("views.index"))


@views_bp.route("/tasks/<task_id>/delete", methods=["POST"])
@login_required
def delete_task(task_id: str):
    """Ask for confirmation before deleting *task_id*."""
    g.workspace.dashboard.request_delete(task_id)
    return redirect(url_for("views.index"))


@views_bp.route("/tasks/delete/confirm", methods=["POST"])
@login_required
def confirm_delete():
    """Answer the pending delete confirmation (``confirm=yes`` deletes)."""
    accepted = request.form.get("confirm") == "yes"
    if g.workspace.dashboard.resolve_delete(accepted):
        flash("Task deleted successfully", "success")
    return redirect(url_for("views.index"))


@views_bp.route("/tasks/<task_id>/status", methods=["POST"])
@login_required
def update_status(task_id: str):
    """Change only the status of *task_id*; the server's record wins."""
    new_status = request.form.get("status", "")
    if g.workspace.dashboard.change_status(task_id, new_status) is not None:
        flash(f"Status updated to {new_status}", "success")
    return redirect(url_for("views.index"))
