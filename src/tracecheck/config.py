"""
Configuration for the verification harness.

Values are resolved in this order, later sources winning:
1. Built-in defaults (tracecheck.defaults)
2. A YAML file: explicit path, or TRACECHECK_CONFIG
3. Environment variables (TRACECHECK_BACKEND_URL, TRACECHECK_POLL_DEADLINE,
   TRACECHECK_POLL_INTERVAL, TRACECHECK_MIN_LENGTH, TRACECHECK_REQUEST_TIMEOUT)

Example YAML:

    backend_url: http://localhost:18080
    poll:
      deadline: 60
      interval: 0.25
      min_length: 2
    request_timeout: 5
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from .defaults import (
    DEFAULT_BACKEND_URL,
    DEFAULT_MIN_LENGTH,
    DEFAULT_POLL_DEADLINE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
)

CONFIG_ENV = "TRACECHECK_CONFIG"


@dataclass(frozen=True)
class HarnessConfig:
    """Resolved harness settings; durations are in seconds."""

    backend_url: str = DEFAULT_BACKEND_URL
    poll_deadline: float = DEFAULT_POLL_DEADLINE
    poll_interval: float = DEFAULT_POLL_INTERVAL
    min_length: int = DEFAULT_MIN_LENGTH
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self):
        if not self.backend_url:
            raise ValueError("backend_url must not be empty")
        if self.poll_deadline < 0:
            raise ValueError("poll_deadline must be non-negative")
        if self.poll_interval < 0:
            raise ValueError("poll_interval must be non-negative")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")


def load_yaml(path: Path, default: Any = None) -> Any:
    """Load YAML file; return default on missing file or when the top level is not a mapping."""
    if default is None:
        default = {}
    if not path.exists():
        return default
    with path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)
    return data if isinstance(data, dict) else default


def _as_float(name: str, raw: Any) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _as_int(name: str, raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _overrides_from_yaml(data: dict[str, Any]) -> dict[str, Any]:
    """Map the YAML layout onto HarnessConfig field names."""
    overrides: dict[str, Any] = {}
    url = data.get("backend_url")
    if isinstance(url, str) and url.strip():
        overrides["backend_url"] = url.strip()
    poll = data.get("poll") or {}
    if isinstance(poll, dict):
        if "deadline" in poll:
            overrides["poll_deadline"] = _as_float("poll.deadline", poll["deadline"])
        if "interval" in poll:
            overrides["poll_interval"] = _as_float("poll.interval", poll["interval"])
        if "min_length" in poll:
            overrides["min_length"] = _as_int("poll.min_length", poll["min_length"])
    if "request_timeout" in data:
        overrides["request_timeout"] = _as_float("request_timeout", data["request_timeout"])
    return overrides


def _overrides_from_env() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    url = os.environ.get("TRACECHECK_BACKEND_URL", "").strip()
    if url:
        overrides["backend_url"] = url
    for env_name, field_name in (
        ("TRACECHECK_POLL_DEADLINE", "poll_deadline"),
        ("TRACECHECK_POLL_INTERVAL", "poll_interval"),
        ("TRACECHECK_REQUEST_TIMEOUT", "request_timeout"),
    ):
        raw = os.environ.get(env_name, "").strip()
        if raw:
            overrides[field_name] = _as_float(env_name, raw)
    raw_min = os.environ.get("TRACECHECK_MIN_LENGTH", "").strip()
    if raw_min:
        overrides["min_length"] = _as_int("TRACECHECK_MIN_LENGTH", raw_min)
    return overrides


def load_config(path: str | Path | None = None) -> HarnessConfig:
    """Resolve a HarnessConfig from defaults, an optional YAML file and the environment."""
    config = HarnessConfig()
    if path is None:
        env_path = os.environ.get(CONFIG_ENV, "").strip()
        path = env_path or None
    if path is not None:
        config = replace(config, **_overrides_from_yaml(load_yaml(Path(path))))
    return replace(config, **_overrides_from_env())
