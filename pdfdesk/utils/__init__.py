"""
Utility functions and helpers.
"""
from .paths import (
    get_app_data_dir,
    get_config_dir,
    get_cache_dir,
)
from .config import AppConfig, load_config
from .log import configure_logging, LOG_FORMAT, LOG_LEVELS

__all__ = [
    # Directories
    'get_app_data_dir',
    'get_config_dir',
    'get_cache_dir',

    # Configuration
    'AppConfig',
    'load_config',

    # Logging
    'configure_logging',
    'LOG_FORMAT',
    'LOG_LEVELS',
]
