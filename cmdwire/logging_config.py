"""Logging configuration for cmdwire.

Log lines go to stderr (stdout is the console gateway's reply stream)
and, when the log directory is writable, to rotating files: one
combined ``cmdwire.log`` plus one file per dispatch subsystem.
"""

import logging
import logging.handlers
import re
import sys
from pathlib import Path
from typing import Any, Dict

import structlog

SUBSYSTEMS = ("dispatch", "commands", "gateway")

LOGGER_PREFIX = "cmdwire"

_SECRET_PATTERNS = [
    re.compile(r"(?:Bearer|Bot)\s+[a-zA-Z0-9_./-]{20,}"),
    # Discord-style bot token
    re.compile(r"[A-Za-z0-9_-]{23,28}\.[A-Za-z0-9_-]{6,7}\.[A-Za-z0-9_-]{27,}"),
    re.compile(r"xox[abprs]-[A-Za-z0-9-]{10,}"),
]

_REDACTED = "***REDACTED***"


def _scrub_value(value: str) -> str:
    for pattern in _SECRET_PATTERNS:
        value = pattern.sub(_REDACTED, value)
    return value


def sanitize_secrets(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor that scrubs chat-service tokens.

    Walks all string values in the event dict (one level into lists,
    tuples and dicts) and replaces matches with a placeholder.
    """
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = _scrub_value(value)
        elif isinstance(value, (list, tuple)):
            event_dict[key] = type(value)(
                _scrub_value(v) if isinstance(v, str) else v
                for v in value
            )
        elif isinstance(value, dict):
            event_dict[key] = {
                k: _scrub_value(v) if isinstance(v, str) else v
                for k, v in value.items()
            }
    return event_dict


def _level(name: str, default: int) -> int:
    return getattr(logging, name.upper(), default) if name else default


def _attach_file(
    logger: logging.Logger,
    path: Path,
    level: int,
    formatter: logging.Formatter,
    max_bytes: int,
    backup_count: int,
) -> None:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def setup_logging(config=None) -> None:
    """Configure structlog on top of stdlib logging.

    Called twice by ``main``: once with no config so startup errors are
    visible, then with the loaded Config. Only the second call caches
    loggers.

    Args:
        config: Optional Config supplying the log directory, levels and
            rotation settings.
    """
    if config is not None:
        log_dir = config.log_dir
        level = _level(config.logging_level, logging.INFO)
        subsystem_levels = config.logging_subsystem_levels
        max_bytes = config.logging_max_file_size_mb * 1024 * 1024
        backup_count = config.logging_backup_count
    else:
        log_dir = Path(__file__).parent.parent / "logs"
        level = logging.INFO
        subsystem_levels = {}
        max_bytes = 10 * 1024 * 1024
        backup_count = 5

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        write_files = True
    except OSError as exc:
        print(
            f"WARNING: cannot create log directory {log_dir}: {exc}; "
            "logging to stderr only",
            file=sys.stderr,
        )
        write_files = False

    file_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
    )

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    root.addHandler(console)

    package_logger = logging.getLogger(LOGGER_PREFIX)
    package_logger.setLevel(logging.DEBUG)
    package_logger.handlers.clear()
    package_logger.propagate = True
    if write_files:
        _attach_file(
            package_logger, log_dir / "cmdwire.log", level,
            file_formatter, max_bytes, backup_count,
        )

    for subsystem in SUBSYSTEMS:
        sub_logger = logging.getLogger(f"{LOGGER_PREFIX}.{subsystem}")
        sub_level = _level(subsystem_levels.get(subsystem, ""), level)
        sub_logger.setLevel(sub_level)
        sub_logger.handlers.clear()
        sub_logger.propagate = True
        if write_files:
            _attach_file(
                sub_logger, log_dir / f"{subsystem}.log", sub_level,
                file_formatter, max_bytes, backup_count,
            )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            sanitize_secrets,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=config is not None,
    )
