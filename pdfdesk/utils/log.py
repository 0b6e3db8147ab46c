"""
Logging setup shared by the desktop app and the processing service.
"""
import logging
from typing import Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


def configure_logging(level: Union[str, int] = 'INFO') -> None:
    """
    Configure the root logger.

    Args:
        level: Level name such as 'DEBUG' or a logging constant
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
