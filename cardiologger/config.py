from __future__ import annotations

import json
import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path("~/.config/cardiologger/config.json").expanduser()
DEFAULT_API_HOST = "https://cardiologger.otterbagel.com/v1"

CONFIG_ENV_OVERRIDES = {
    "api_host": "CARDIOLOGGER_API_HOST",
    "sync_interval_ms": "CARDIOLOGGER_SYNC_INTERVAL_MS",
    "default_timezone": "CARDIOLOGGER_DEFAULT_TIMEZONE",
    "request_timeout_s": "CARDIOLOGGER_REQUEST_TIMEOUT_S",
    "credentials_path": "CARDIOLOGGER_CREDENTIALS",
    "log_path": "CARDIOLOGGER_LOG",
    "log_level": "CARDIOLOGGER_LOG_LEVEL",
}

_INT_KEYS = {"sync_interval_ms"}
_FLOAT_KEYS = {"request_timeout_s"}


def get_config_path(path: Path | None = None) -> Path:
    candidate = path or Path(os.getenv("CARDIOLOGGER_CONFIG", DEFAULT_CONFIG_PATH))
    return candidate.expanduser()


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    config_path = get_config_path(path)
    if not config_path.exists():
        return {}
    raw = config_path.read_text()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("invalid config json") from exc
    if not isinstance(data, dict):
        raise ValueError("config must be an object")
    return data


def write_config_file(data: dict[str, Any], path: Path | None = None) -> Path:
    config_path = get_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n")
    return config_path


def get_env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, env_var in CONFIG_ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is not None:
            overrides[key] = value
    return overrides


@dataclass
class CardiologgerConfig:
    api_host: str = DEFAULT_API_HOST
    sync_interval_ms: int = 5000
    default_timezone: str = "UTC"
    request_timeout_s: float = 10.0
    credentials_path: str = "~/.config/cardiologger/credentials.json"
    log_path: str | None = "~/.cardiologger/cardiologger.log"
    log_level: str = "WARNING"

    @property
    def sync_interval_s(self) -> float:
        return self.sync_interval_ms / 1000.0


def _parse_int(value: object, default: int, *, key: str) -> int:
    if value is None:
        return default
    try:
        parsed = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid int for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    if parsed <= 0:
        warnings.warn(f"Invalid int for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    return parsed


def _parse_float(value: object, default: float, *, key: str) -> float:
    if value is None:
        return default
    try:
        parsed = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid float for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    if parsed <= 0:
        warnings.warn(f"Invalid float for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    return parsed


def load_config(path: Path | None = None) -> CardiologgerConfig:
    cfg = CardiologgerConfig()
    config_path = get_config_path(path)
    if config_path.exists():
        try:
            data = read_config_file(config_path)
        except ValueError as exc:
            warnings.warn(f"Invalid config file {config_path}: {exc}", RuntimeWarning, stacklevel=2)
            data = {}
        cfg = _apply_dict(cfg, data)
    cfg = _apply_env(cfg)
    return cfg


def _apply_dict(cfg: CardiologgerConfig, data: dict[str, Any]) -> CardiologgerConfig:
    for key, value in data.items():
        if not hasattr(cfg, key) or key == "sync_interval_s":
            continue
        if key in _INT_KEYS:
            setattr(cfg, key, _parse_int(value, getattr(cfg, key), key=key))
            continue
        if key in _FLOAT_KEYS:
            setattr(cfg, key, _parse_float(value, getattr(cfg, key), key=key))
            continue
        if key == "log_path" and not value:
            cfg.log_path = None
            continue
        if value is None:
            continue
        setattr(cfg, key, str(value))
    return cfg


def _apply_env(cfg: CardiologgerConfig) -> CardiologgerConfig:
    cfg.api_host = os.getenv("CARDIOLOGGER_API_HOST", cfg.api_host)
    cfg.sync_interval_ms = _parse_int(
        os.getenv("CARDIOLOGGER_SYNC_INTERVAL_MS"), cfg.sync_interval_ms, key="sync_interval_ms"
    )
    cfg.default_timezone = os.getenv("CARDIOLOGGER_DEFAULT_TIMEZONE", cfg.default_timezone)
    cfg.request_timeout_s = _parse_float(
        os.getenv("CARDIOLOGGER_REQUEST_TIMEOUT_S"),
        cfg.request_timeout_s,
        key="request_timeout_s",
    )
    cfg.credentials_path = os.getenv("CARDIOLOGGER_CREDENTIALS", cfg.credentials_path)
    log_path = os.getenv("CARDIOLOGGER_LOG")
    if log_path is not None:
        # An empty value turns the file sink off.
        cfg.log_path = log_path or None
    cfg.log_level = os.getenv("CARDIOLOGGER_LOG_LEVEL", cfg.log_level)
    return cfg
