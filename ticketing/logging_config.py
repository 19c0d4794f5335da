import logging
import sys

import structlog

from ticketing.config import settings


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    level_name = (level or settings.log_level).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    use_json = settings.log_json if json_logs is None else json_logs

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if use_json:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(level=log_level, stream=sys.stdout, format="%(message)s", force=True)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
