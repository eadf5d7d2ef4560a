import logging
import sys

import structlog

from .settings import settings


def setup_logging(level: str | None = None, *, plain_text: bool | None = None) -> None:
    """
    Route structlog and stdlib logging to stdout.
    JSON lines by default; plain console output with LOG_PLAIN_TEXT=1 or plain_text=True.
    Arguments override the corresponding settings, for embedding applications.
    """
    level = level or settings.LOG_LEVEL
    if plain_text is None:
        plain_text = settings.LOG_PLAIN_TEXT

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    foreign_pre_chain = [*shared_processors]
    processors = [structlog.stdlib.filter_by_level, *shared_processors]

    if plain_text:
        renderer = structlog.dev.ConsoleRenderer(timestamp_key="timestamp")
    else:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
        foreign_pre_chain.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.format_exc_info)

    processors.append(structlog.stdlib.ProcessorFormatter.wrap_for_formatter)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=foreign_pre_chain)
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
