"""Application-wide settings and derived paths."""

from __future__ import annotations

import socket
from datetime import timedelta
from pathlib import Path

APP_NAME = "clipbird"
MAX_HISTORY_SIZE = 20
WINDOW_SIZE = (350, 400)
CERT_EXPIRY_INTERVAL = timedelta(days=60)
MAX_READ_IDLE_TIME = timedelta(seconds=60)
MAX_WRITE_IDLE_TIME = timedelta(seconds=10)
HISTORY_SHORTCUT = "Ctrl+Alt+C"
LOG_FILE_NAME = "clipbird.log"
_MDNS_SERVICE_TYPE = "_clipbird._tcp"


def app_home(home: str | Path | None = None) -> Path:
    """Directory holding the application's files, under the user's home."""
    base = Path.home() if home is None else Path(home)
    return base / f".{APP_NAME}"


def app_log_file(home: str | Path | None = None) -> Path:
    """Path of the application's log file."""
    return app_home(home) / LOG_FILE_NAME


def mdns_service_name() -> str:
    """Name this host announces itself under: the machine's host name."""
    return socket.gethostname()


def mdns_service_type() -> str:
    """Service type used for discovery."""
    return _MDNS_SERVICE_TYPE