"""
Logging setup, config load from environment (.env supported), safe_print.
"""

import os
import json
import sys
import logging
from pathlib import Path

from dotenv import load_dotenv

from .exceptions import ConfigError


# ─── Safe print (no crash when stdout is closed) ─────────────────

def safe_print(*args, **kwargs):
    try:
        print(*args, **kwargs)
    except (OSError, ValueError):
        pass


# ─── Logging ─────────────────────────────────────────────────────

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 1_000_000

log = logging.getLogger("reconcile")


def setup_logging(log_file=None, level="INFO"):
    """Attach console (and optional file) handlers to the reconcile logger."""
    log.setLevel(level)
    log.propagate = False
    for handler in list(log.handlers):
        log.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            if path.exists() and path.stat().st_size > MAX_LOG_BYTES:
                path.write_text("")
        except OSError:
            pass
        file_handler = logging.FileHandler(str(path), encoding="utf-8")
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    log.addHandler(console_handler)
    return log


# ─── Config Management ──────────────────────────────────────────

def _env_int(name, default):
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def parse_devices(raw):
    """Parse the DEVICES JSON list into [{url, username, password}, ...]."""
    try:
        devices = json.loads(raw or "[]")
    except json.JSONDecodeError as e:
        raise ConfigError(f"DEVICES is not valid JSON: {e}")
    if not isinstance(devices, list):
        raise ConfigError("DEVICES must be a JSON list")

    parsed = []
    for index, device in enumerate(devices):
        if not isinstance(device, dict):
            raise ConfigError(f"DEVICES[{index}] must be an object")
        missing = [k for k in ("url", "username", "password") if not device.get(k)]
        if missing:
            raise ConfigError(f"DEVICES[{index}] is missing: {', '.join(missing)}")
        parsed.append({
            "url": str(device["url"]).rstrip("/"),
            "username": str(device["username"]),
            "password": str(device["password"]),
        })
    return parsed


def _log_level():
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if level not in logging.getLevelNamesMapping():
        raise ConfigError(f"LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL, got {level!r}")
    return level


def load_config(env_file=None):
    """Load config from environment variables (and .env if present). Returns dict."""
    load_dotenv(env_file)
    return {
        "grantType": os.environ.get("GRANT_TYPE", "client_credentials"),
        "clientId": _env_int("CLIENT_ID", 3),
        "clientSecret": os.environ.get("CLIENT_SECRET", "supersecret"),
        "tokenApiUrl": os.environ.get("TOKEN_API_URL", "https://app.nusawork.com/api/token"),
        "tokenRefreshMargin": _env_int("TOKEN_REFRESH_MARGIN", 60),
        "attendanceApiBaseUrl": os.environ.get(
            "ATTENDANCE_API_BASE_URL", "http://app.nusawork.com/api/attendance"
        ).rstrip("/"),
        "attendanceApiUrl": os.environ.get(
            "ATTENDANCE_API_URL", "http://app.nusawork.com/api/attendance/storage"
        ),
        "lastDays": _env_int("LAST_DAYS", 3),
        "devices": parse_devices(os.environ.get("DEVICES", "[]")),
        "logFile": os.environ.get("LOG_FILE") or None,
        "logLevel": _log_level(),
    }
