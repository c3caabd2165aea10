import logging
from pathlib import Path
from typing import Optional

LOG_MODES = ("off", "info", "debug")
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Current log mode, changed by set_log_mode()
_log_mode = "info"
_log_file: Optional[Path] = None

# Names of loggers handed out by get_logger()
_managed_loggers = set()


def get_log_mode() -> str:
    """Get the current log mode."""
    return _log_mode


def _levels_for(log_mode: str):
    """Return (logger_level, console_level) for a log mode."""
    if log_mode == 'debug':
        return logging.DEBUG, logging.DEBUG
    if log_mode == 'off':
        # Off mode: disable all logging
        return logging.CRITICAL + 1, logging.CRITICAL + 1
    return logging.INFO, logging.INFO


def _apply_mode(logger: logging.Logger) -> None:
    """Bring a managed logger's level and handlers in line with the current mode."""
    logger_level, console_level = _levels_for(_log_mode)
    logger.setLevel(logger_level)

    log_format = logging.Formatter(LOG_FORMAT)

    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    wanted_file = _log_file is not None and _log_mode != 'off'

    # Drop file handlers pointing somewhere else (or all of them when not wanted)
    for handler in file_handlers:
        if not wanted_file or Path(handler.baseFilename) != _log_file.absolute():
            handler.close()
            logger.removeHandler(handler)

    if wanted_file and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        _log_file.parent.mkdir(parents=True, exist_ok=True)
        f_handler = logging.FileHandler(_log_file, encoding='utf-8')
        f_handler.setLevel(logging.DEBUG)
        f_handler.setFormatter(log_format)
        logger.addHandler(f_handler)

    # Update console handlers
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(console_level)


def set_log_mode(log_mode: str, log_file: Optional[Path] = None) -> None:
    """
    Change the log mode and update every logger created by get_logger().

    Args:
        log_mode: 'off', 'info' or 'debug'
        log_file: Optional file that receives a copy of all log records

    Raises:
        ValueError: If log_mode is unknown
    """
    global _log_mode, _log_file
    if log_mode not in LOG_MODES:
        raise ValueError(f"Unknown log mode '{log_mode}', expected one of {', '.join(LOG_MODES)}")

    _log_mode = log_mode
    _log_file = Path(log_file) if log_file else None

    for logger_name in list(_managed_loggers):
        _apply_mode(logging.getLogger(logger_name))


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)

    # Prevent duplicate handlers if logger already configured
    if name in _managed_loggers:
        _apply_mode(logger)
        return logger

    # Console handler goes to stderr so command output on stdout stays clean
    c_handler = logging.StreamHandler()
    c_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(c_handler)

    _managed_loggers.add(name)
    _apply_mode(logger)
    return logger
