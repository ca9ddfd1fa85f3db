"""
Logging setup for applications embedding the similarity engine.

The library itself only creates module loggers; call setup_logging()
once from the application entry point.
"""
import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_FILE_NAME = "similarity.log"


def setup_logging(log_dir: str | None = None, level: str | None = None) -> logging.Logger:
    """
    Configure the root logger for console and, optionally, file output.

    Args:
        log_dir: Directory for the log file (LOG_DIR if None; no file if unset)
        level: Level name (LOG_LEVEL if None, default INFO)

    Returns:
        The configured root logger
    """
    log_dir = log_dir if log_dir is not None else os.getenv("LOG_DIR")
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    log_formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)
    root_logger.addHandler(console_handler)

    # File handler (persistent logs)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, LOG_FILE_NAME)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(log_formatter)
        root_logger.addHandler(file_handler)
        root_logger.info(f"Logging initialized. Log file: {log_file}")

    return root_logger
