import logging
import typing as t
from collections.abc import Iterator
from contextlib import contextmanager

import structlog


def build_processors(*, level: int = logging.INFO) -> list[t.Any]:
    """
    Processor chain for ``level``.

    Debug output carries call sites and colors; quieter levels render plain
    ``key=value`` lines with exceptions formatted inline.

    Parameters
    ----------
    level : int, optional
        Level of the ``reqenum`` logger.

    Returns
    -------
    list[typing.Any]
        structlog processors, renderer last.
    """
    processors: list[t.Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if level <= logging.DEBUG:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                {
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                }
            )
        )
        processors.append(structlog.processors.StackInfoRenderer())
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.KeyValueRenderer(key_order=["event", "level"]))
    return processors


def setup_logging(*, level: int = logging.INFO) -> None:
    """
    Route structlog events through the ``reqenum`` stdlib logger.

    Parameters
    ----------
    level : int, optional
        Level of the ``reqenum`` logger.
    """
    logging.basicConfig(format="%(message)s")
    logging.getLogger(name="reqenum").setLevel(level=level)
    structlog.configure(
        processors=build_processors(level=level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@contextmanager
def logging_context(**context: t.Any) -> Iterator[None]:
    """
    Bind context vars for the duration of a block.

    Keys the caller already bound are left untouched and ``None`` values are
    skipped, so an outer dispatch id survives nested calls.

    Parameters
    ----------
    **context : typing.Any
        Values to bind.
    """
    current = structlog.contextvars.get_contextvars()
    to_bind = {
        key: value for key, value in context.items() if value is not None and key not in current
    }
    if not to_bind:
        yield
        return

    with structlog.contextvars.bound_contextvars(**to_bind):
        yield
