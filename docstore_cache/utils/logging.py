"""structlog setup for docstore-cache.

Modules log with ``structlog.get_logger(logger_name=__name__)`` and never
configure anything at import time, so importing the package leaves the host
application's logging untouched.  :func:`configure_logging` is the one place
that installs a configuration; :func:`docstore_cache.factory.build_cache`
calls it with the configured ``logging.level``.

Cache events are key-value records (``cache_hit``, ``cache_save_failed``,
``elasticsearch_request_rejected`` ...).  They render as coloured console
lines in development and as one JSON object per line when
``APP_ENV=production`` or ``json_output=True``.  Standard-library records,
notably ``httpx``'s request log, go through the same renderer.
"""

import logging
import os
import sys

import structlog

# httpx logs every request at INFO, i.e. one line per cache lookup.
_NOISY_LOGGERS = ("httpx", "httpcore")

# Marks the stdlib handler installed here so reconfiguring replaces only it.
_HANDLER_NAME = "docstore_cache"


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Route structlog and stdlib logging through one renderer.

    Args:
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Below DEBUG the ``httpx``/``httpcore`` loggers are held at
            WARNING.
        json_output: Force JSON lines.  Otherwise JSON is used only when
            ``APP_ENV`` is ``production``.

    Calling it again replaces the handler it installed earlier; handlers the
    host application attached to the root logger are kept.

    Returns:
        A logger bound to the new configuration.
    """
    level = log_level.upper()
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    noisy_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    return structlog.get_logger(logger_name="docstore_cache")
