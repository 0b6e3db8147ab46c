"""
Application configuration.

Values come from the defaults below, then config.json in the user config
directory, then PDFDESK_* environment variables.
"""
import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .paths import get_config_dir

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"
DEFAULT_FUNCTIONS_URL = "http://127.0.0.1:8080"

ENV_VARS = {
    'functions_url': 'PDFDESK_FUNCTIONS_URL',
    'api_key': 'PDFDESK_API_KEY',
    'access_token': 'PDFDESK_ACCESS_TOKEN',
    'request_timeout': 'PDFDESK_REQUEST_TIMEOUT',
    'log_level': 'PDFDESK_LOG_LEVEL',
}


@dataclass(frozen=True)
class AppConfig:
    """Settings of the desktop application."""
    functions_url: str = DEFAULT_FUNCTIONS_URL
    api_key: Optional[str] = None
    access_token: Optional[str] = None
    request_timeout: Optional[float] = None  # seconds; None = no timeout
    log_level: str = 'INFO'


def _coerce(name: str, value: Any) -> Any:
    if value is None or value == '':
        return getattr(AppConfig, name)
    if name == 'request_timeout':
        try:
            timeout = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid request timeout: {value!r}")
        return timeout if timeout > 0 else None
    if name == 'log_level':
        return str(value).upper()
    return str(value)


def _read_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: expected a JSON object", path)
        return {}
    return data


def load_config(config_dir: Optional[Path] = None,
                environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Build the effective configuration.

    Args:
        config_dir: Directory containing config.json; defaults to the
            per-user config directory
        environ: Environment to read; defaults to os.environ

    Returns:
        The merged configuration

    Raises:
        ValueError: if a setting has an invalid value
    """
    environ = os.environ if environ is None else environ
    config_dir = get_config_dir() if config_dir is None else Path(config_dir)

    known = {f.name for f in fields(AppConfig)}
    overrides: Dict[str, Any] = {}

    for key, value in _read_file(config_dir / CONFIG_FILE).items():
        if key in known:
            overrides[key] = _coerce(key, value)
        else:
            logger.debug("Unknown config key %r", key)

    for name, var in ENV_VARS.items():
        if var in environ:
            overrides[name] = _coerce(name, environ[var])

    return replace(AppConfig(), **overrides)
