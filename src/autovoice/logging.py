"""structlog setup shared by the CLI and the HTTP service.

Everything is written to stderr so that `autovoice generate-feed` can put
feed XML on stdout. Every event carries a `service` field, and the chatty
per-request logs of the HTTP client libraries are held at WARNING unless
DEBUG is requested.
"""

import logging
import sys

import structlog

SERVICE_NAME = "autovoice"

# Libraries that log one line per HTTP request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore")


def add_service(service: str) -> structlog.types.Processor:
    """Build a processor that tags events with the service name.

    An explicitly bound `service` value is left alone.
    """

    def processor(logger, method_name, event_dict):
        event_dict.setdefault("service", service)
        return event_dict

    return processor


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    service: str = SERVICE_NAME,
) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR).
        json_format: Render JSON lines instead of console output.
        service: Value of the `service` field on every event.
    """
    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service(service),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
    ]

    if json_format:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
