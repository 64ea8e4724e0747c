"""Command-line entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Load Settings
- Run the daily pipeline, or serve the offline mirror (``server.mode``)
"""

from __future__ import annotations

import asyncio
import logging
import sys

import structlog

from inspoclock import __version__
from inspoclock.config import Settings
from inspoclock.errors import InspoClockError
from inspoclock.offline.mirror import serve_mirror
from inspoclock.pipeline import run_daily

log = structlog.get_logger()


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr — stdout carries the CATBOX_URL= line for CI steps
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def generate(settings: Settings) -> int:
    """Run the daily pipeline once. Returns the process exit status."""
    log.info("daily_run_starting", version=__version__)
    try:
        url = asyncio.run(run_daily(settings))
    except InspoClockError as exc:
        log.error(
            "daily_run_failed",
            code=exc.code,
            message=exc.message,
            suggestion=exc.suggestion,
            recoverable=exc.recoverable,
        )
        return 1
    except Exception:
        log.error("daily_run_unexpected_error", exc_info=True)
        return 1

    print(f"CATBOX_URL={url}")
    return 0


def main() -> None:
    settings = Settings()
    _setup_logging(settings)

    if settings.server.mode == "serve":
        try:
            asyncio.run(serve_mirror(settings))
        except InspoClockError as exc:
            log.error("mirror_start_failed", code=exc.code, message=exc.message)
            sys.exit(1)
        return

    sys.exit(generate(settings))


if __name__ == "__main__":
    main()
