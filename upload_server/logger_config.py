import logging
import sys
from pathlib import Path

LOGGER_NAME = "upload_server"

FILE_FORMAT = '%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logger():
    logger = logging.getLogger(LOGGER_NAME)
    # Every module calls this on import; configure handlers only once
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    # Console handler (for basic logging)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    return logger


def configure_file_logging(log_dir) -> Path:
    """Send detailed logs to <log_dir>/upload_server.log, replacing any previous log file."""
    logger = setup_logger()

    # Create logs directory if it doesn't exist
    logs_dir = Path(log_dir)
    logs_dir.mkdir(exist_ok=True, parents=True)
    log_path = logs_dir / f"{LOGGER_NAME}.log"

    for handler in logger.handlers[:]:
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    # File handler (for detailed logging)
    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(file_handler)

    return log_path
