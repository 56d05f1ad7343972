"""Structured logging configuration — structlog + stdlib logging."""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

_ANNOTATIONS = {"warning": "::warning::", "error": "::error::", "critical": "::error::"}


class GitHubActionsRenderer:
    """Render events as GitHub Actions workflow commands.

    Warnings and errors become ``::warning::`` / ``::error::`` annotations so
    they show up on the workflow run summary; other levels are plain lines.
    """

    def __init__(self) -> None:
        self._console = structlog.dev.ConsoleRenderer(colors=False)

    def __call__(self, logger: object, method_name: str, event_dict: dict) -> str:
        level = event_dict.get("level", method_name)
        prefix = _ANNOTATIONS.get(level)
        if prefix is None:
            return self._console(logger, method_name, event_dict)
        event_dict.pop("timestamp", None)
        event_dict.pop("level", None)
        event_dict.pop("logger", None)
        rendered = self._console(logger, method_name, event_dict)
        # Workflow commands are single-line; encode newlines as the runner expects.
        rendered = rendered.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        return prefix + rendered


def default_log_format() -> str:
    if os.environ.get("GITHUB_ACTIONS") == "true":
        return "github"
    return "console"


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog and stdlib logging.

    Explicit arguments win; otherwise reads from environment variables:
        NIV_UPDATER_LOG_LEVEL  — log level (default: INFO)
        NIV_UPDATER_LOG_FORMAT — console | json | github
                                 (default: github under Actions, console elsewhere)
    """
    log_level = (level or os.environ.get("NIV_UPDATER_LOG_LEVEL", "INFO")).upper()
    log_format = (fmt or os.environ.get("NIV_UPDATER_LOG_FORMAT") or default_log_format()).lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    elif log_format == "github":
        renderer = GitHubActionsRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared_processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "structlog",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": log_level,
            },
            "loggers": {
                "niv_updater": {"level": log_level},
                "httpx": {"level": "WARNING"},
                "httpcore": {"level": "WARNING"},
            },
        }
    )
