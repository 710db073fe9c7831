"""
Logging setup shared by scripts and the analysis workflow.
"""

import logging
from typing import Optional, Union

from .config_loader import get_config_value

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_HANDLER_NAME = 'sunscope'


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger with the project format.

    Calling this again replaces the handlers it installed earlier instead
    of stacking new ones.

    Args:
        level: Logging level (name or number)
        log_file: Optional path of a file to mirror log records into

    Returns:
        The configured root logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if handler.get_name() and handler.get_name().startswith(_HANDLER_NAME):
            root_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.set_name(f'{_HANDLER_NAME}.stream')
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.set_name(f'{_HANDLER_NAME}.file')
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)
    return root_logger


def setup_logging_from_config(config: dict) -> logging.Logger:
    """Configure logging from the 'logging.level' and 'logging.file' config keys."""
    return setup_logging(
        level=get_config_value(config, 'logging.level', 'INFO'),
        log_file=get_config_value(config, 'logging.file'),
    )
