"""Error observer helpers.

Observers are fire-and-forget callables. A failing observer is logged and
never interrupts the caller.
"""

import logging

from influx2hny.core.ports import ErrorObserver


def logging_observer(logger: logging.Logger) -> ErrorObserver:
    """Return an observer that logs each error at WARNING on the given logger."""

    def observe(exc: Exception) -> None:
        logger.warning("%s: %s", type(exc).__name__, exc)

    return observe


def notify(observer: ErrorObserver | None, exc: Exception, logger: logging.Logger) -> None:
    """Report an error to an observer without letting the observer raise.

    Args:
        observer: The observer to call. Falls back to logging when None.
        exc: The error being reported.
        logger: Component logger used for the fallback and observer failures.
    """
    if observer is None:
        logging_observer(logger)(exc)
        return
    try:
        observer(exc)
    except Exception:
        logger.exception("error observer failed while handling %r", exc)
