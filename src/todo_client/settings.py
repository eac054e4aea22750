from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    """
    Client settings loaded from environment variables.

    Env vars:
    - TODO_API_BASE_URL: root URL of the task service. Default 'http://localhost:5000/api'
    - TODO_API_TIMEOUT: request timeout in seconds (default: 10)
    - TODO_LOG_LEVEL: logging level name for setup_logging (default: INFO)
    - TODO_SERIALIZE_TASK_OPS: 'true' to serialize operations on the same task id (default: true)
    - TODO_DISCARD_STALE_LOADS: 'true' to drop the result of a load superseded by a newer one (default: true)
    """

    api_base_url: str
    request_timeout: float
    log_level: str
    serialize_task_ops: bool
    discard_stale_loads: bool


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_timeout(value: str, default: float) -> float:
    try:
        timeout = float(value)
    except ValueError:
        return default
    return timeout if timeout > 0 else default


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return client settings loaded from environment variables."""
    base_url = _get_env("TODO_API_BASE_URL", "http://localhost:5000/api").strip().rstrip("/")
    timeout = _parse_timeout(_get_env("TODO_API_TIMEOUT", "10"), 10.0)

    log_level = _get_env("TODO_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        # Fallback to INFO if unsupported
        log_level = "INFO"

    return Settings(
        api_base_url=base_url,
        request_timeout=timeout,
        log_level=log_level,
        serialize_task_ops=_parse_bool(_get_env("TODO_SERIALIZE_TASK_OPS", "true"), True),
        discard_stale_loads=_parse_bool(_get_env("TODO_DISCARD_STALE_LOADS", "true"), True),
    )
