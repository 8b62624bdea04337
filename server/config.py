"""Service settings read from environment variables.

    ITS_TCP_HOST          Listener bind address (default 0.0.0.0)
    ITS_TCP_PORT          Listener port (default 5137, 0 picks a free port)
    ITS_DEVICES           Comma-separated identifiers registered at startup
    ITS_REGISTER_UNKNOWN  Register unknown identifiers on first sight
    ITS_LOG_LEVEL         Root log level (default INFO)
    ITS_LOG_JSON          Emit JSON log lines
    ITS_LOG_FILE          Also log to this rotating file
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

__all__ = ["Settings", "load_settings"]

logger = logging.getLogger(__name__)

_DEFAULT_HOST = "0.0.0.0"
_DEFAULT_PORT = 5137
_TRUE_VALUES = ("true", "1", "yes", "on")


@dataclass(frozen=True)
class Settings:
    tcp_host: str = _DEFAULT_HOST
    tcp_port: int = _DEFAULT_PORT
    devices: tuple[str, ...] = field(default_factory=tuple)
    register_unknown: bool = False
    log_level: str = "INFO"
    log_json: bool = False
    log_file: str | None = None


def _get_bool(environ: Mapping[str, str], key: str) -> bool:
    return environ.get(key, "").strip().lower() in _TRUE_VALUES


def _get_port(environ: Mapping[str, str]) -> int:
    raw = environ.get("ITS_TCP_PORT")
    if raw is None:
        return _DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError:
        port = -1
    if not 0 <= port <= 65535:
        logger.warning(f"Invalid ITS_TCP_PORT {raw!r}, using default {_DEFAULT_PORT}")
        return _DEFAULT_PORT
    return port


def _get_devices(environ: Mapping[str, str]) -> tuple[str, ...]:
    raw = environ.get("ITS_DEVICES", "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from ``environ`` (defaults to ``os.environ``)."""
    if environ is None:
        environ = os.environ
    return Settings(
        tcp_host=environ.get("ITS_TCP_HOST", _DEFAULT_HOST).strip() or _DEFAULT_HOST,
        tcp_port=_get_port(environ),
        devices=_get_devices(environ),
        register_unknown=_get_bool(environ, "ITS_REGISTER_UNKNOWN"),
        log_level=environ.get("ITS_LOG_LEVEL", "INFO").upper(),
        log_json=_get_bool(environ, "ITS_LOG_JSON"),
        log_file=environ.get("ITS_LOG_FILE") or None,
    )
