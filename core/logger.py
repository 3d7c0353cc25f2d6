"""
Logging configuration for Bitpin Monitor, driven by the ``logging`` settings section.
"""

import logging
import logging.handlers
import sys
from pathlib import Path

from config.settings import LoggingConfig, default_config_dir

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"

# Per-request chatter from urllib3 drowns the poll log below WARNING
NOISY_LOGGERS = ("urllib3",)


def resolve_level(level: str | int | None, default: int = logging.INFO) -> int:
    """Accept "DEBUG"/"info"/10 style levels; unknown names fall back to ``default``."""
    if isinstance(level, int):
        return level
    if not level:
        return default
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else default


def log_file_path(config: LoggingConfig) -> Path:
    log_dir = Path(config.directory) if config.directory else default_config_dir() / "logs"
    return log_dir / config.filename


def setup_logging(config: LoggingConfig | None = None, level: str | int | None = None) -> Path:
    """
    Setup logging from settings.

    Args:
        config: Logging section of the settings. Defaults apply when None.
        level: Overrides ``config.level`` (e.g. from the LOG_LEVEL environment variable).

    Returns:
        Path of the log file.
    """
    config = config or LoggingConfig()
    log_level = resolve_level(level if level is not None else config.level)

    log_file = log_file_path(config)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    handlers: list[logging.Handler] = [file_handler]
    if config.console:
        # stderr keeps the console listing on stdout readable
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = handlers

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    logging.info(f"Logging initialized at {logging.getLevelName(log_level)}. Log file: {log_file}")
    return log_file
