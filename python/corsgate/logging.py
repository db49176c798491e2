"""structlog setup for corsgate.

Every record, from structlog or from stdlib loggers such as uvicorn, goes
through one processor chain and one stdout handler. Request-scoped fields
(path, method, origin) are bound with request_context() and merged into each
event by structlog.contextvars.merge_contextvars.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from structlog.contextvars import bound_contextvars, merge_contextvars
from structlog.types import Processor

QUIET_LOGGERS = ("uvicorn.access",)


def _pre_chain() -> list[Processor]:
    return [
        merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(json_format: bool = True, level: int = logging.INFO) -> None:
    """Route structlog and stdlib logging through a single stdout handler.

    Args:
        json_format: Render JSON lines when True, console output otherwise.
        level: Root log level.
    """
    pre_chain = _pre_chain()
    renderer: Processor = (
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def request_context(
    path: str | None = None,
    method: str | None = None,
    origin: str | None = None,
) -> Iterator[None]:
    """Bind request fields to every event logged inside the block.

    Fields that are None are not bound. Previous bindings are restored on exit,
    so concurrent requests never see each other's fields.
    """
    fields = {"path": path, "method": method, "origin": origin}
    with bound_contextvars(**{key: value for key, value in fields.items() if value is not None}):
        yield
