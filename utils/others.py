import logging
import os
from datetime import datetime

from definitions import LOGS_DIR

logger = logging.getLogger(__name__)

DEFAULT_LOG_FILE_NAME = "bskypost"

# Never echo these config keys into the log.
SECRET_KEYS = {"password", "auth_factor_token", "access_jwt", "refresh_jwt"}


class ColoredFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[38;5;244m",  # gray
        "INFO": "\033[38;5;120m",  # soft mint green
        "WARNING": "\033[38;5;221m",  # warm yellow
        "ERROR": "\033[38;5;196m",  # bright red
        "CRITICAL": "\033[1;38;5;196;48;5;232m",  # bold bright red on dark bg
    }
    RESET = "\033[0m"

    def format(self, record):
        level = record.levelname
        if level in self.COLORS:
            record.levelname = f"{self.COLORS[level]}{level}{self.RESET}"
        return super().format(record)


def setup_logging(config, console=False, debug=False, logs_dir=LOGS_DIR):
    """
    Sets up the logging configuration based on provided settings.

    Args:
        config (dict): The configuration dictionary; `script.log_file_name` names the log file.
        console (bool): If True, log to console instead of a file.
        debug (bool): If True, set the logging level to DEBUG; otherwise, INFO.
        logs_dir (Path): Directory for log files (defaults to LOGS_DIR).

    Returns:
        str | None: The log file path, or None when logging to the console.
    """
    # Generate log file name
    script_config = config.get("script", {}) or {}
    log_file_name_base = script_config.get("log_file_name", DEFAULT_LOG_FILE_NAME)
    log_file_name_time = datetime.now().strftime("%Y%m%d%H%M%S")
    log_file_name_full = f"{log_file_name_base}-{log_file_name_time}.log"
    log_file_path = os.path.join(logs_dir, log_file_name_full)

    # Define logger level
    logger_level = logging.DEBUG if debug else logging.INFO

    # Define logging format
    log_format = "%(asctime)s [%(name)s.%(funcName)s:%(lineno)d] %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    # Configure logging handlers
    handlers = []

    if console:
        handler = logging.StreamHandler()
        handler.setFormatter(ColoredFormatter(log_format, datefmt=date_format))
        handlers.append(handler)
    else:
        os.makedirs(logs_dir, exist_ok=True)
        handler = logging.FileHandler(log_file_path)
        handler.setFormatter(logging.Formatter(log_format, date_format))
        handlers.append(handler)

    # Set up the logging configuration
    logging.basicConfig(
        level=logger_level,
        format=log_format,
        datefmt=date_format,
        handlers=handlers,
        force=True,
    )

    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.INFO)

    # Log initialization messages
    logger.info("Logging initialized.")
    if console:
        logger.info("Logging to console.")
        return None

    logger.info(f"Logging to file: {log_file_path}")
    return log_file_path


def redact(section):
    """Copy of a config section with secret values masked."""
    return {key: ("***" if key in SECRET_KEYS and value else value) for key, value in (section or {}).items()}


def log_startup_info(args, config):
    """
    Log startup information, including arguments and configuration details.

    Args:
        args (Namespace): The parsed arguments.
        config (dict): The configuration dictionary.
    """
    logger.info("#" * 80)
    logger.info("New instance of bskypost started.")
    logger.info("TIME: %s", datetime.now())
    logger.info("Startup Parameters:")

    # Log all argument values dynamically
    for arg, value in vars(args).items():
        logger.info(f"  ARG - {arg}: {value}")

    logger.info("Configuration:")
    for section in ("bluesky", "transcode"):
        for key, value in redact(config.get(section)).items():
            logger.info(f"  {section.upper()} - {key}: {value}")

    logger.info("#" * 80)
