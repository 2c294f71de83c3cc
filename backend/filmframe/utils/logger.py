# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
FilmFrame - Structured Logging
One JSON line per event via structlog, tagged app="filmframe".

CompositionPipeline.compose() binds a short run_id into structlog's
contextvars for the length of one composition. asyncio.to_thread copies
the context into the worker, so the stage_start / stage_complete /
stage_failed events of the CPU stages carry the same run_id as the
composition_start and composition_complete events around them. Preview
events (preview_submitted, preview_delivered, preview_discarded,
preview_callback_failed) carry the scheduler generation instead.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from filmframe.config import get_settings


def _add_app_info(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    """Tag every entry so FilmFrame lines can be filtered out of a host app's log."""
    event_dict["app"] = "filmframe"
    return event_dict


def configure_logging() -> None:
    """
    Route FilmFrame's structlog events to stdout.
    FILMFRAME_LOG_LEVEL=DEBUG switches to the coloured console renderer and
    also surfaces the per-stage debug events (geometry_applied,
    vintage_applied, caption_rendered, font_resolved). Any other level
    emits JSON with tracebacks rendered as dicts.
    Called by init_components(); calling it again reapplies the settings.
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_app_info,
    ]

    if settings.log_level == "DEBUG":
        processors: list[Processor] = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True)
        ]
    else:
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: str = "filmframe") -> structlog.BoundLogger:
    """
    Module-level logger for a FilmFrame component.

    Usage:
        log = get_logger(__name__)
        log.debug("vintage_applied", mode="warm", width=1920, height=1080)

    Code that runs a composition outside CompositionPipeline.compose()
    can scope its own events the same way:
        structlog.contextvars.bind_contextvars(run_id=run_id)
        ...
        structlog.contextvars.unbind_contextvars("run_id")
    """
    return structlog.get_logger(name)
