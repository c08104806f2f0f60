"""Browser-based web UI for the safe-mode console.

This package provides a Flask application that exposes the shell
through a web browser.  It is an **optional** extra — install with::

    pip install hackframe-os[web]

The ``create_app`` factory in ``app.py`` boots a kernel, creates a
shell, and serves three endpoints:

- ``GET /`` — HTML terminal page with the boot banner.
- ``POST /api/execute`` — execute a command and return JSON.
- ``GET /api/status`` — progress counters for the header bar.
"""
