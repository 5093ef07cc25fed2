"""structlog setup.

Learn: Modules only ever call structlog.get_logger() and log events with
dotted names plus key/value context (e.g. "task_list.created",
task_list_id=...). This module decides how those events are rendered:
colored key/value lines in development, one JSON object per line when
TASKBOARD_LOG_JSON is set.
"""

import logging

import structlog

from taskboard.config import settings


def configure_logging(level: str | None = None, json: bool | None = None) -> None:
    """Configure structlog processors. Safe to call more than once."""
    level_name = (level or settings.log_level).upper()
    use_json = settings.log_json if json is None else json

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level_name)
        ),
        cache_logger_on_first_use=True,
    )
