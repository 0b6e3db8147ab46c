"""
Per-user directories for configuration, data and cached results.
"""
import os
import sys
from pathlib import Path

APP_NAME = "PDFDesk"


def _ensure(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_app_data_dir(app_name: str = APP_NAME) -> Path:
    """
    Get the application data directory for storing user data.

    Args:
        app_name: Name of the application

    Returns:
        Path to the app data directory
    """
    if os.name == 'nt':  # Windows
        base_dir = os.environ.get('APPDATA', os.path.expanduser('~'))
    elif sys.platform == 'darwin':  # macOS
        base_dir = os.path.expanduser('~/Library/Application Support')
    else:  # Linux and others
        base_dir = os.environ.get('XDG_DATA_HOME', os.path.expanduser('~/.local/share'))

    return _ensure(Path(base_dir) / app_name)


def get_config_dir(app_name: str = APP_NAME) -> Path:
    """
    Get the directory holding config.json.

    Args:
        app_name: Name of the application

    Returns:
        Path to the config directory
    """
    if os.name == 'nt':
        config_dir = get_app_data_dir(app_name) / "config"
    elif sys.platform == 'darwin':
        config_dir = Path.home() / "Library" / "Preferences" / app_name
    else:
        base_dir = os.environ.get('XDG_CONFIG_HOME', str(Path.home() / ".config"))
        config_dir = Path(base_dir) / app_name

    return _ensure(config_dir)


def get_cache_dir(app_name: str = APP_NAME) -> Path:
    """
    Get the cache directory, used by the processing service for its results.

    Args:
        app_name: Name of the application

    Returns:
        Path to the cache directory
    """
    if os.name == 'nt':
        cache_dir = Path(os.environ.get('LOCALAPPDATA', os.path.expanduser('~'))) / app_name / "cache"
    elif sys.platform == 'darwin':
        cache_dir = Path.home() / "Library" / "Caches" / app_name
    else:
        base_dir = os.environ.get('XDG_CACHE_HOME', str(Path.home() / ".cache"))
        cache_dir = Path(base_dir) / app_name

    return _ensure(cache_dir)
