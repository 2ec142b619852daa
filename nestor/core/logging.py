"""
Logging Setup.

structlog on top of the stdlib logging module. The CLI calls setup_logging()
once per invocation; library modules only ever call get_logger(__name__).

Settings come from config/settings/logging.yaml. Outside a project (no
.project_root marker) DEFAULT_LOGGING_CONFIG applies: warnings and above,
rendered for humans on stderr. stdout is reserved for command output, so
``nestor job console my-job > build.log`` captures build text only.

Every record carries timestamp, level, logger, event, func_name and lineno.
Records emitted through log_with_source also carry ``source``, one of
VALID_SOURCES. The CLI binds ``source=cli`` for the whole invocation.

Usage:
    from nestor.core.logging import get_logger, log_with_source

    logger = get_logger(__name__)
    logger.debug("Console stream finished", extra={"job_name": name})
    log_with_source(logger, "monitor", "warning", "Monitor tick dropped", skipped_ticks=3)
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog
from structlog.typing import Processor

from nestor.core.config import find_project_root, load_yaml_config

VALID_SOURCES = frozenset({"cli", "monitor", "library"})

DEFAULT_LOGGING_CONFIG: dict[str, Any] = {
    "level": "WARNING",
    "format": "console",
    "handlers": {
        "console": {"enabled": True},
        "file": {
            "enabled": False,
            "path": "logs/system.jsonl",
            "max_bytes": 10485760,
            "backup_count": 5,
        },
    },
}

_logging_config: dict[str, Any] | None = None


def _load_logging_config() -> dict[str, Any]:
    """Read logging.yaml once; DEFAULT_LOGGING_CONFIG when there is no project."""
    global _logging_config
    if _logging_config is None:
        try:
            _logging_config = load_yaml_config("logging.yaml")
        except RuntimeError:
            _logging_config = DEFAULT_LOGGING_CONFIG
    return _logging_config


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _rotating_file_handler(file_config: dict[str, Any], formatter: logging.Formatter) -> logging.Handler:
    log_path = find_project_root() / file_config["path"]
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=file_config["max_bytes"],
        backupCount=file_config["backup_count"],
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the root logger.

    Arguments left as None take their value from logging.yaml. Calling
    this again replaces the root logger's handlers.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: "console" for human-readable stderr output, "json" otherwise
        enable_console: Write records to stderr
        enable_file_logging: Write JSON records to the rotating file under the project root
    """
    config = _load_logging_config()
    handlers = config["handlers"]

    if level is None:
        level = config["level"]
    if format_type is None:
        format_type = config["format"]
    if enable_console is None:
        enable_console = handlers["console"]["enabled"]
    if enable_file_logging is None:
        enable_file_logging = handlers["file"]["enabled"]

    processors = _shared_processors()
    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=processors,
    )
    if format_type == "console":
        stderr_formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=True),
            foreign_pre_chain=processors,
        )
    else:
        stderr_formatter = json_formatter

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if enable_console:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(stderr_formatter)
        root.addHandler(stderr_handler)
    if enable_file_logging:
        root.addHandler(_rotating_file_handler(handlers["file"], json_formatter))

    # Per-request chatter from the HTTP stack; our transport logs requests itself
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """structlog logger for a module, typically get_logger(__name__)."""
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Emit ``message`` at ``level`` with an explicit ``source`` field.

    Raises:
        AttributeError: ``level`` is not a logger method name
    """
    getattr(logger, level.lower())(message, source=source, **kwargs)
