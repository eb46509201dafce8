#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging setup for the launcher

Three modes share the same handlers and differ only in format and threshold:
- customer: short timestamped lines, INFO and above
- verbose: adds the level name, DEBUG and above
- debug: adds logger and function names, everything down to TRACE

Console output goes through a queue so download workers never wait on the
terminal. Files rotate by size and are pruned by age with cleanup_logs().
Registered secrets (the session access token) are masked on every handler.
"""

# Standard library imports
import atexit
import io
import logging
import logging.handlers
import os
import queue
import sys
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional, Set

# Local imports
from config import (
    APP_NAME,
    CLIENT_LOG_FILE_PATTERN,
    LOG_FILE_PATTERN,
    LOG_FILE_PREFIX,
    LOG_MAX_AGE_S,
    LOG_MAX_FILE_SIZE_MB_DEFAULT,
    LOG_SEPARATOR_WIDTH,
    LOG_TIMESTAMP_FORMAT,
    REDACTED_PLACEHOLDER,
    UPDATER_LOG_FILE_PATTERN,
)

TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


logging.Logger.trace = trace

_MODE_FORMATS = {
    'customer': ("%(asctime)s | %(message)s", logging.INFO),
    'verbose': ("%(asctime)s | %(levelname)-7s | %(message)s", logging.DEBUG),
    'debug': ("%(asctime)s | %(levelname)-7s | %(name)-15s | %(funcName)-20s | %(message)s", TRACE),
}
_CONSOLE_DATEFMT = "%H:%M:%S"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"
_QUIET_LOGGERS = ("urllib3", "urllib3.connectionpool", "requests")

_log_mode = 'customer'
_console_listener: Optional[logging.handlers.QueueListener] = None
_dedicated: Dict[str, logging.Logger] = {}
_secrets: Set[str] = set()
_secrets_lock = threading.Lock()


def get_log_mode() -> str:
    """Mode chosen by the last setup_logging() call"""
    return _log_mode


def _mode_settings(log_mode: str):
    return _MODE_FORMATS.get(log_mode, _MODE_FORMATS['debug'])


# ==================== Secret masking ====================

def register_secret(value: Optional[str]) -> None:
    """Add a value that must never appear in log output. Empty values are ignored."""
    if value:
        with _secrets_lock:
            _secrets.add(value)


def mask_secrets(text: str) -> str:
    with _secrets_lock:
        known = list(_secrets)
    for value in known:
        text = text.replace(value, REDACTED_PLACEHOLDER)
    return text


class SecretMaskingFilter(logging.Filter):
    """Replaces registered secrets in the rendered message of each record"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not _secrets:
            return True
        try:
            rendered = record.getMessage()
        except Exception:  # noqa: BLE001
            # Malformed args; let the handler report it
            return True
        cleaned = mask_secrets(rendered)
        if cleaned != rendered:
            record.msg, record.args = cleaned, ()
        return True


# ==================== Handlers ====================

class SizeRotatingCompositeHandler(logging.Handler):
    """
    Wraps a per-file handler and moves on to a numbered sibling file
    (name.log, name.log.1, name.log.2, ...) once the active file reaches
    max_bytes. Old parts are left in place for cleanup_logs().
    """

    def __init__(self, base_path: Path, create_handler_fn: Callable[[Path], logging.Handler], max_bytes: int):
        super().__init__()
        self.base_path = Path(base_path)
        self.create_handler_fn = create_handler_fn
        self.max_bytes = max_bytes
        self.part = 0
        self.current_path = self.base_path
        self.current_handler = self._open(self.current_path)

    def _part_path(self, part: int) -> Path:
        if not part:
            return self.base_path
        return self.base_path.with_name(f"{self.base_path.name}.{part}")

    def _open(self, path: Path) -> logging.Handler:
        handler = self.create_handler_fn(path)
        handler.setLevel(self.level)
        if self.formatter is not None:
            handler.setFormatter(self.formatter)
        return handler

    def _is_full(self) -> bool:
        try:
            return self.current_path.stat().st_size >= self.max_bytes
        except FileNotFoundError:
            return False

    def emit(self, record):
        try:
            if self._is_full():
                self.current_handler.close()
                self.part += 1
                self.current_path = self._part_path(self.part)
                self.current_handler = self._open(self.current_path)
            self.current_handler.emit(record)
        except Exception:  # noqa: BLE001
            self.handleError(record)

    def setFormatter(self, fmt):
        super().setFormatter(fmt)
        self.current_handler.setFormatter(fmt)

    def setLevel(self, level):
        super().setLevel(level)
        self.current_handler.setLevel(level)

    def flush(self):
        self.current_handler.flush()

    def close(self):
        try:
            self.current_handler.close()
        finally:
            super().close()


class SafeStreamHandler(logging.StreamHandler):
    """Console handler that stays silent when the stream is closed or missing"""

    def __init__(self, stream=None):
        super().__init__(stream if stream is not None else io.StringIO())

    def handleError(self, record):
        pass


def _console_stream():
    # Windowed builds point stdout at devnull or leave it unset
    out, err = sys.stdout, sys.stderr
    if out is None or getattr(out, 'name', None) == os.devnull:
        return err if err is not None else out
    return out


def _stop_console_listener() -> None:
    global _console_listener
    listener, _console_listener = _console_listener, None
    if listener is not None:
        listener.stop()
        for handler in listener.handlers:
            handler.close()


atexit.register(_stop_console_listener)


def _build_console_handler(log_mode: str) -> logging.Handler:
    global _console_listener
    fmt, level = _mode_settings(log_mode)
    stream_handler = SafeStreamHandler(_console_stream())
    stream_handler.setFormatter(logging.Formatter(fmt, _CONSOLE_DATEFMT))

    _stop_console_listener()
    records: "queue.SimpleQueue[logging.LogRecord]" = queue.SimpleQueue()
    _console_listener = logging.handlers.QueueListener(records, stream_handler)
    _console_listener.start()

    front = logging.handlers.QueueHandler(records)
    front.setLevel(level)
    front.addFilter(SecretMaskingFilter())
    return front


def _create_file_handler(base_path: Path, log_mode: str) -> SizeRotatingCompositeHandler:
    fmt, level = _mode_settings(log_mode)
    handler = SizeRotatingCompositeHandler(
        base_path,
        lambda path: logging.FileHandler(path, encoding='utf-8'),
        int(LOG_MAX_FILE_SIZE_MB_DEFAULT * 1024 * 1024),
    )
    handler.setFormatter(logging.Formatter(fmt, _FILE_DATEFMT))
    handler.setLevel(level)
    handler.addFilter(SecretMaskingFilter())
    return handler


def _new_log_path(prefix: str) -> Path:
    from .paths import get_logs_dir
    return get_logs_dir() / f"{prefix}_{datetime.now().strftime(LOG_TIMESTAMP_FORMAT)}.log"


# ==================== Setup ====================

def _announce_start(log_mode: str, log_file: Optional[Path]) -> None:
    startup = logging.getLogger("startup")
    file_label = log_file.name if log_file else None

    if log_mode == 'customer':
        suffix = f"Log: {file_label}" if file_label else "logs disabled"
        startup.info(f"✅ {APP_NAME} Started ({suffix})")
        return

    bar = "=" * LOG_SEPARATOR_WIDTH
    startup.info(bar)
    startup.info(f"{APP_NAME} - Starting... (Log file: {file_label or 'disabled'})")
    startup.info(bar)
    if log_mode == 'debug':
        startup.info("Debug mode: ON (function names and TRACE records included)")
    else:
        startup.info("Verbose mode: ON (DEBUG records included)")
    if log_file:
        startup.debug(f"Log file location: {log_file.absolute()}")


def setup_logging(log_mode: str = 'customer', *, write_logs: bool = True) -> Optional[Path]:
    """
    Replace the root handlers with a console handler and, optionally, a session log file.

    Args:
        log_mode: 'customer', 'verbose' or 'debug'
        write_logs: False keeps output on the console only

    Returns:
        Path of the session log file, or None when no file is written
    """
    global _log_mode
    _log_mode = log_mode

    root = logging.getLogger()
    for previous in list(root.handlers):
        root.removeHandler(previous)
        previous.close()
    root.addHandler(_build_console_handler(log_mode))

    log_file = None
    if write_logs:
        try:
            log_file = _new_log_path(LOG_FILE_PREFIX)
            root.addHandler(_create_file_handler(log_file, log_mode))
        except OSError as e:
            log_file = None
            print(f"Warning: Could not setup file logging: {e}", file=sys.stderr)

    # Handlers do the level filtering
    root.setLevel(TRACE)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _announce_start(log_mode, log_file)
    return log_file


def get_logger(name: str = "lumen") -> logging.Logger:
    return logging.getLogger(name)


def get_named_logger(name: str, prefix: str, log_mode: Optional[str] = None) -> logging.Logger:
    """
    Logger with its own rotating file (e.g. log_updater_<timestamp>.log).

    The file is opened on first use and the same logger is returned afterwards.
    Records still propagate to the root handlers.

    Args:
        name: Logger name
        prefix: File name prefix
        log_mode: Format override; the current mode when omitted
    """
    existing = _dedicated.get(name)
    if existing is not None:
        return existing

    logger = logging.getLogger(name)
    try:
        file_handler = _create_file_handler(_new_log_path(prefix), log_mode or _log_mode)
    except OSError as exc:
        logger.warning(f"No dedicated log file for '{name}': {exc}")
    else:
        for previous in list(logger.handlers):
            logger.removeHandler(previous)
            previous.close()
        logger.addHandler(file_handler)
    logger.setLevel(TRACE)
    logger.propagate = True
    _dedicated[name] = logger
    return logger


def cleanup_logs(max_age_s: float = LOG_MAX_AGE_S) -> int:
    """
    Remove session, updater and client logs last modified more than max_age_s ago.

    Returns:
        How many files were removed
    """
    from .paths import get_user_data_dir

    logs_dir = get_user_data_dir() / "logs"
    if not logs_dir.is_dir():
        return 0

    cutoff = time.time() - max_age_s
    removed = 0
    for pattern in (LOG_FILE_PATTERN, UPDATER_LOG_FILE_PATTERN, CLIENT_LOG_FILE_PATTERN):
        for log_file in logs_dir.glob(pattern):
            try:
                if log_file.stat().st_mtime < cutoff:
                    log_file.unlink()
                    removed += 1
            except OSError as e:
                # Logging may not be configured yet
                print(f"Warning: Could not remove {log_file.name}: {e}", file=sys.stderr)
    return removed


# ==================== Pretty Logging Helpers ====================

def log_section(logger: logging.Logger, title: str, icon: str = "📌", details: dict = None, mode: str = None):
    """
    Log a heading, one line in customer mode and a framed block otherwise.

    Example:
        log_section(log, "Preparing client", "🎮", {"Server": "Industrial", "Version": "1.12.2"})
    """
    details = details or {}
    if (mode or _log_mode) == 'customer':
        extra = ", ".join(f"{key}: {value}" for key, value in details.items())
        logger.info(f"{icon} {title} ({extra})" if extra else f"{icon} {title}")
        return

    bar = "=" * LOG_SEPARATOR_WIDTH
    logger.info(bar)
    logger.info(f"{icon} {title.upper()}")
    for key, value in details.items():
        logger.info(f"   📋 {key}: {value}")
    logger.info(bar)


def log_event(logger: logging.Logger, event: str, icon: str = "✓", details: dict = None):
    """
    Log one event followed by indented key/value lines.

    Example:
        log_event(log, "Runtime unpacked", "☕", {"Major": 17, "Path": "runtimes/java-17-linux-x64"})
    """
    logger.info(f"{icon} {event}")
    for key, value in (details or {}).items():
        logger.info(f"   • {key}: {value}")


def log_action(logger: logging.Logger, action: str, icon: str = "⚡"):
    logger.info(f"{icon} {action}")


def log_success(logger: logging.Logger, message: str, icon: str = "✅"):
    logger.info(f"{icon} {message}")
