"""
Provides structured logging with log levels and an optional file sink.

Every entry is a single line with a UTC timestamp, the level, a dotted event
name and key-value pairs, which keeps batch logs easy to grep and parse.
Lines go through tqdm so they print above an active progress bar.
"""
import threading
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, Any, Optional, TextIO

from tqdm import tqdm

_print_lock = threading.Lock()
_separator = " | "
_log_file: Optional[TextIO] = None


class LogLevel(Enum):
    """Log level enumeration."""
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4


_current_level = LogLevel.INFO


def set_log_level(level: LogLevel) -> None:
    """Set the current log level."""
    global _current_level
    _current_level = level


def set_log_file(path: Optional[Path]) -> None:
    """
    Mirror every log line into `path` (appending). Passing None closes the
    current file sink.
    """
    global _log_file
    with _print_lock:
        if _log_file is not None:
            _log_file.close()
            _log_file = None
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            _log_file = open(path, "a", encoding="utf-8", buffering=1)


def _format_kv(data: Dict[str, Any]) -> str:
    """Format key-value pairs for logging."""
    parts = []
    for key, value in data.items():
        if isinstance(value, str):
            # Escape quotes and newlines to keep log entries single-line.
            escaped = value.replace("\r", "\\r").replace("\n", "\\n")
            escaped = escaped.replace('"', '\\"')
            parts.append(f'{key}="{escaped}"')
        elif value is None:
            parts.append(f'{key}=null')
        elif isinstance(value, bool):
            parts.append(f'{key}={str(value).lower()}')
        else:
            parts.append(f'{key}={value}')
    return _separator.join(parts)


def _write_line(text: str) -> None:
    tqdm.write(text)
    if _log_file is not None:
        _log_file.write(text + "\n")


def _should_log(level: LogLevel) -> bool:
    """Check if a message at the given level should be logged."""
    return level.value >= _current_level.value


def log(event: str, level: LogLevel = LogLevel.INFO, **kwargs) -> None:
    """
    Structured logging function.

    Args:
        event: Event name (e.g., 'batch.start', 'job.failed')
        level: Log level (TRACE, DEBUG, INFO, WARN, ERROR)
        **kwargs: Key-value pairs to log
    """
    if not _should_log(level):
        return

    with _print_lock:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        kv_str = _format_kv(kwargs) if kwargs else ""
        header = f"{timestamp}{_separator}[{level.name}]{_separator}{event}"

        if kv_str:
            _write_line(f"{header}{_separator}{kv_str}")
        else:
            _write_line(header)


def safe_print(*args, **kwargs) -> None:
    """
    Print a plain operator-facing message (mirrored to the log file).
    Use log() for structured logging instead.
    """
    sep = kwargs.get("sep", " ")
    text = sep.join(str(a) for a in args)
    with _print_lock:
        tqdm.write(text, file=kwargs.get("file"))
        if _log_file is not None:
            _log_file.write(text + "\n")
