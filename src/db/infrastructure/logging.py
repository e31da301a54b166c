"""Structlog configuration for the toolchain commands.

Configures structlog with colored console output for interactive use
and JSON output when the commands run under CI or a container.
"""

import logging
import os
import sys

import structlog


def configure_logging(level: int = logging.INFO) -> None:
    """Configure structlog with appropriate processors.

    Uses colored console output when FORCE_COLOR is set or stderr is a TTY,
    otherwise JSON lines. Events below ``level`` are dropped.
    """
    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    use_colors = force_color or sys.stderr.isatty()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if use_colors:
        processors: list[structlog.types.Processor] = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    # Toolchain output goes to stderr so command stdout stays clean
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
