"""
project: TimeSync
module: server.py
License: MIT

Server bootstrap for the level API.
"""

import logging
import sys

from timesync import create_app


def start_server(host="0.0.0.0", port=5000, debug: bool = False):  # pragma: no cover (runtime only)
    """Run the Flask development server with console logging configured."""
    app = create_app()
    if not debug:
        _configure_logging()
    try:
        print(f"[INFO] Starting level API on {host}:{port}")
        app.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)


def _configure_logging():
    """Route stdlib logging (Flask, werkzeug) to the console."""
    root = logging.getLogger()
    root.setLevel(logging.INFO)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    # Avoid duplicate handlers if reconfigured
    for h in list(root.handlers):
        root.removeHandler(h)

    root.addHandler(console)
