"""
Configuration for railflush.
Reads the Railway token, target services, project and environment from the
process environment and validates them before any network call is made.
"""

import logging
import os
from dataclasses import dataclass, field

DEFAULT_API_URL = "https://backboard.railway.com/graphql/v2"
DEFAULT_LOG_LEVEL = "INFO"


class ConfigError(ValueError):
    """Raised when a required setting is missing or invalid."""


@dataclass(frozen=True)
class Config:
    api_token: str = field(repr=False)
    service_ids: tuple
    project_id: str
    environment_id: str
    api_url: str = DEFAULT_API_URL
    log_level: str = DEFAULT_LOG_LEVEL


def parse_service_ids(raw):
    """Split a comma separated list, trimming entries and dropping blanks."""
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _first_set(environ, *names):
    for name in names:
        value = environ.get(name, "")
        if value:
            return value
    return ""


def load_config(environ=None) -> Config:
    """Build a Config from the environment, raising ConfigError on the first bad field."""
    if environ is None:
        environ = os.environ

    token = environ.get("RAILWAY_API_TOKEN", "")
    if not token:
        raise ConfigError("RAILWAY_API_TOKEN is required")

    raw = environ.get("SERVICE_IDS", "")
    if not raw:
        raise ConfigError("SERVICE_IDS is required")
    service_ids = parse_service_ids(raw)
    if not service_ids:
        raise ConfigError("SERVICE_IDS must contain at least one service ID")

    project_id = _first_set(environ, "PROJECT_ID", "RAILWAY_PROJECT_ID")
    if not project_id:
        raise ConfigError("PROJECT_ID (or RAILWAY_PROJECT_ID) is required")

    environment_id = _first_set(environ, "ENVIRONMENT_ID", "RAILWAY_ENVIRONMENT_ID")
    if not environment_id:
        raise ConfigError("ENVIRONMENT_ID (or RAILWAY_ENVIRONMENT_ID) is required")

    log_level = environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"LOG_LEVEL {log_level!r} is not a valid logging level")

    return Config(
        api_token=token,
        service_ids=service_ids,
        project_id=project_id,
        environment_id=environment_id,
        api_url=environ.get("RAILWAY_API_URL", "") or DEFAULT_API_URL,
        log_level=log_level,
    )
