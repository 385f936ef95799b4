"""Structlog logger factory and service mixin."""

from typing import Any

import structlog


def get_struct_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger with the given name.

    Note: For exception logging with debug stack traces, use this pattern:
        try:
            # some operation
        except OSError as e:
            exc_info = logger.isEnabledFor(logging.DEBUG)
            logger.error("operation_failed", error=str(e), exc_info=exc_info)
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


class StructlogMixin:
    """Give a class a ``logger`` bound with ``service=<class name>``."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._logger: structlog.stdlib.BoundLogger | None = None

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        if self._logger is None:
            self._logger = get_struct_logger(self.__class__.__module__).bind(
                service=self.__class__.__name__
            )
        return self._logger


__all__ = ["StructlogMixin", "get_struct_logger"]
