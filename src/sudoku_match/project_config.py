"""Utility helpers for loading the match core configuration."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

_CONFIG_FILENAME = "config.toml"
CONFIG_PATH_ENV = "SUDOKU_MATCH_CONFIG"
REQUIRED_PLAYERS = 2


_PATH_OVERRIDE: Path | None = None


def _config_path() -> Path:
    if _PATH_OVERRIDE is not None:
        return _PATH_OVERRIDE
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override)
    return Path(__file__).resolve().parent / _CONFIG_FILENAME


@lru_cache(maxsize=1)
def get_config() -> Dict[str, Any]:
    """Load and cache the configuration as a dictionary."""
    path = _config_path()
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        raise RuntimeError(f"Configuration file '{path}' was not found") from exc


def reload(path: str | Path | None = None) -> None:
    """Clear the cached configuration, optionally switching to the TOML file at ``path``."""

    global _PATH_OVERRIDE
    _PATH_OVERRIDE = Path(path) if path else None
    get_config.cache_clear()


def get_section(path: str, default: Any = None) -> Any:
    """Retrieve a nested configuration value using dotted notation."""

    data: Any = get_config()
    for part in path.split("."):
        if isinstance(data, dict) and part in data:
            data = data[part]
        else:
            if default is not None:
                return default
            raise KeyError(f"Configuration path '{path}' not found")
    return data


@dataclass(frozen=True)
class ServiceConfig:
    """Endpoints and credentials of the external match service."""

    base_url: str
    server_key: str
    server_key_header: str
    match_type_name: str
    match_type_path: str
    match_create_path: str
    match_finish_path: str
    request_timeout_s: float

    def url(self, path: str) -> str:
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")

    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.server_key:
            headers[self.server_key_header] = self.server_key
        return headers


@dataclass(frozen=True)
class SessionConfig:
    """Settings handed to each session at construction."""

    difficulty: float
    max_players: int
    dispose_delay_s: float
    reconnect_window_s: float
    service: ServiceConfig
    log_level: str = "INFO"
    events_dir: str = ""
    events_max_bytes: int = 100 * 1024 * 1024


def _parse_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _parse_int(value: Any) -> Optional[int]:
    try:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip():
            return int(value)
    except (TypeError, ValueError):
        return None
    return None


def _parse_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    return None


# field -> (toml section, toml key, environment key, parser)
_FIELDS: Dict[str, Tuple[str, str, Optional[str], Callable[[Any], Any]]] = {
    "difficulty": ("session", "difficulty", "SUDOKU_DIFFICULTY", _parse_float),
    "max_players": ("session", "max_players", "SUDOKU_MAX_PLAYERS", _parse_int),
    "dispose_delay_s": ("session", "dispose_delay_s", "SUDOKU_DISPOSE_DELAY_S", _parse_float),
    "reconnect_window_s": ("session", "reconnect_window_s", "SUDOKU_RECONNECT_WINDOW_S", _parse_float),
    "base_url": ("service", "base_url", "SERVER_URL", _parse_str),
    "server_key": ("service", "server_key", "SERVER_KEY", _parse_str),
    "server_key_header": ("service", "server_key_header", None, _parse_str),
    "match_type_name": ("service", "match_type_name", "SUDOKU_MATCH_TYPE", _parse_str),
    "match_type_path": ("service", "match_type_path", None, _parse_str),
    "match_create_path": ("service", "match_create_path", None, _parse_str),
    "match_finish_path": ("service", "match_finish_path", None, _parse_str),
    "request_timeout_s": ("service", "request_timeout_s", "SUDOKU_REQUEST_TIMEOUT_S", _parse_float),
    "log_level": ("logging", "level", "SUDOKU_LOG_LEVEL", _parse_str),
    "events_dir": ("logging", "events_dir", "SUDOKU_EVENTS_DIR", _parse_str),
    "events_max_bytes": ("logging", "events_max_bytes", None, _parse_int),
}


def _resolve(name: str, env: Mapping[str, str], overrides: Mapping[str, Any]) -> Any:
    section, key, env_key, parse = _FIELDS[name]
    try:
        value = parse(get_section(f"{section}.{key}"))
    except KeyError:
        value = None
    if value is None:
        raise RuntimeError(f"Configuration value '{section}.{key}' is missing or malformed")

    if env_key is not None and env_key in env:
        candidate = parse(env[env_key])
        if candidate is not None:
            value = candidate
    if name in overrides:
        candidate = parse(overrides[name])
        if candidate is not None:
            value = candidate
    return value


def load_session_config(
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> SessionConfig:
    """Build a :class:`SessionConfig` from TOML, environment and explicit overrides.

    Later layers win: explicit ``overrides`` beat ``env`` (defaults to
    ``os.environ``) which beats the TOML file.  A value that cannot be parsed is
    ignored and the previous layer's value is kept.
    """

    env_map = dict(os.environ) if env is None else dict(env)
    override_map = dict(overrides or {})
    values = {name: _resolve(name, env_map, override_map) for name in _FIELDS}

    if values["max_players"] != REQUIRED_PLAYERS:
        raise ValueError(f"max_players must be {REQUIRED_PLAYERS}, got {values['max_players']}")

    service = ServiceConfig(
        base_url=values["base_url"],
        server_key=values["server_key"],
        server_key_header=values["server_key_header"],
        match_type_name=values["match_type_name"],
        match_type_path=values["match_type_path"],
        match_create_path=values["match_create_path"],
        match_finish_path=values["match_finish_path"],
        request_timeout_s=max(0.0, values["request_timeout_s"]),
    )
    return SessionConfig(
        difficulty=min(1.0, max(0.0, values["difficulty"])),
        max_players=values["max_players"],
        dispose_delay_s=max(0.0, values["dispose_delay_s"]),
        reconnect_window_s=max(0.0, values["reconnect_window_s"]),
        service=service,
        log_level=values["log_level"].upper(),
        events_dir=values["events_dir"],
        events_max_bytes=values["events_max_bytes"],
    )


__all__ = [
    "CONFIG_PATH_ENV",
    "REQUIRED_PLAYERS",
    "ServiceConfig",
    "SessionConfig",
    "get_config",
    "get_section",
    "load_session_config",
    "reload",
]
