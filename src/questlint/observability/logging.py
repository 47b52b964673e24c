"""Structured logging for questlint.

Two sinks, both fed by structlog through the stdlib ``logging`` tree:

- Console: rich handler on stderr, level chosen by ``-v``/``-vv``. Report
  lines go to stdout, so logs never mix with lint output.
- File: with ``--log``, every event at DEBUG as one JSON object per line
  in ``<logs_dir>/debug.jsonl``.

Events are snake_case names with key/value context. While a quest is being
validated, ``quest_context`` binds its QuestID and source file so every
event emitted inside carries them.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - Used at runtime for path operations
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from collections.abc import Iterator

    from structlog.typing import Processor

LOG_FILE_NAME = "debug.jsonl"

# Loggers of the HTTP stack that flood DEBUG output
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "uvicorn.access", "multipart")

_VERBOSITY_LEVELS = {0: logging.WARNING, 1: logging.INFO}

# Module-level state
_configured = False
_file_handler: logging.FileHandler | None = None
_logs_dir: Path | None = None


def _record_to_entry(record: logging.LogRecord) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "level": record.levelname,
        "logger": record.name,
    }
    # wrap_for_formatter leaves the structlog event dict in record.msg
    if not isinstance(record.msg, dict):
        entry["message"] = record.getMessage()
        return entry

    context = {k: v for k, v in record.msg.items() if k not in ("level", "timestamp")}
    entry["message"] = context.pop("event", "")
    entry.update(context)
    return entry


class JsonLinesHandler(logging.FileHandler):
    """Append each record to the log file as a single JSON line."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(_record_to_entry(record), default=str)
            if self.stream:
                self.stream.write(line + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _console_handler(verbosity: int) -> RichHandler:
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity >= 2,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        markup=False,
        level=_VERBOSITY_LEVELS.get(verbosity, logging.DEBUG),
    )
    # Rich adds level and time itself; render only the event and its context.
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(colors=False),
            ],
            foreign_pre_chain=_shared_processors(),
        )
    )
    return handler


def configure_logging(
    verbosity: int = 0,
    log_to_file: bool = False,
    logs_dir: Path | None = None,
) -> None:
    """Configure console and file logging.

    Safe to call more than once; a previous log file is closed first.

    Args:
        verbosity: 0=WARNING (default), 1=INFO, 2+=DEBUG.
        log_to_file: Also write every event to ``logs_dir/debug.jsonl``.
        logs_dir: Directory for the log file. Required if log_to_file=True.

    Raises:
        ValueError: If log_to_file=True but logs_dir is not provided.
    """
    global _configured, _file_handler, _logs_dir

    if log_to_file and logs_dir is None:
        raise ValueError("logs_dir is required when log_to_file=True")

    close_file_logging()

    handlers: list[logging.Handler] = [_console_handler(verbosity)]
    if log_to_file and logs_dir is not None:
        logs_dir.mkdir(parents=True, exist_ok=True)
        _logs_dir = logs_dir
        _file_handler = JsonLinesHandler(str(logs_dir / LOG_FILE_NAME), mode="a")
        _file_handler.setLevel(logging.DEBUG)
        handlers.append(_file_handler)

    # The root logger lets everything through that any sink wants.
    root_level = logging.DEBUG if (verbosity > 0 or log_to_file) else logging.WARNING
    logging.basicConfig(level=root_level, format="%(message)s", handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Return a structlog logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()

    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


@contextmanager
def quest_context(quest_id: str, source: Path | None = None) -> Iterator[None]:
    """Bind the quest being processed to every event logged inside the block."""
    context: dict[str, Any] = {"quest_id": quest_id}
    if source is not None:
        context["source"] = str(source)
    with structlog.contextvars.bound_contextvars(**context):
        yield


def get_logs_dir() -> Path | None:
    """Directory of the JSONL log, or None if file logging is off."""
    return _logs_dir


def close_file_logging() -> None:
    """Close the JSONL log file, if one is open."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
