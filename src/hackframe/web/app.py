"""Flask application factory for the safe-mode web UI.

The ``create_app`` function boots a kernel, creates a shell, and
returns a Flask app with three endpoints:

- ``GET /`` — render the terminal HTML page with the boot banner.
- ``POST /api/execute`` — execute a command and return JSON.  The
  ``desktop`` flag turns true when ``startx`` succeeds; the page uses
  it to switch scenes.
- ``GET /api/status`` — return the progress counters shown in the
  header bar.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import Flask, Response, jsonify, render_template, request

from hackframe.kernel import Kernel, KernelState
from hackframe.repl import format_boot_log, is_desktop_transition
from hackframe.shell import Shell
from hackframe.syscalls import SyscallNumber

if TYPE_CHECKING:
    from pathlib import Path

_HTTP_BAD_REQUEST = 400
_DEFAULT_PORT = 8080


def create_app(*, image_path: Path | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        image_path: Optional JSON disk image for the kernel.

    Returns:
        A configured Flask application ready to serve.

    """
    kernel = Kernel(image_path=image_path)
    kernel.boot()
    shell = Shell(kernel=kernel)

    boot_log = format_boot_log(kernel.dmesg())

    app = Flask(__name__)

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the terminal HTML page."""
        return render_template("index.html", boot_log=boot_log)

    @app.route("/api/execute", methods=["POST"])
    def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Execute a shell command and return JSON output.

        Expects JSON body: ``{"command": "..."}``

        Returns:
            JSON with ``output`` and ``desktop`` fields.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("command"), str):
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        if kernel.state is not KernelState.RUNNING:
            return jsonify({"output": "System halted.", "desktop": False})

        result = shell.execute(data["command"])
        return jsonify({"output": result, "desktop": is_desktop_transition(result)})

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return progress counters for the header bar.

        Returns:
            JSON with ``running`` and the module/fragment counters.

        """
        if kernel.state is not KernelState.RUNNING:
            return jsonify({"running": False})
        progress: dict[str, int] = kernel.syscall(SyscallNumber.SYS_PROGRESS)
        return jsonify({"running": True, **progress})

    return app


def main() -> None:
    """Run the web UI development server.

    This is the ``hackframe-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=_DEFAULT_PORT)
