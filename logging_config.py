import logging
import os
from datetime import datetime

from config import LOGGING_CONFIG


def setup_logger(name, log_file=None, level=logging.INFO):
    """
    Set up a logger with console output and an optional log file.

    Args:
        name (str): Logger name, None for the root logger
        log_file (str, optional): Path of the log file. When None and
            LOGGING_CONFIG['log_to_file'] is set, a timestamped file is
            created under LOGGING_CONFIG['log_directory'].
        level (int): Console log level
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Calling this twice must not duplicate output
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt=LOGGING_CONFIG['date_format']
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is None and LOGGING_CONFIG['log_to_file']:
        os.makedirs(LOGGING_CONFIG['log_directory'], exist_ok=True)
        timestamp = datetime.now().strftime(LOGGING_CONFIG['timestamp_format'])
        log_file = os.path.join(
            LOGGING_CONFIG['log_directory'],
            f"{LOGGING_CONFIG['file_prefix']}{timestamp}.log"
        )

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
