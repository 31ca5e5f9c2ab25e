"""
_context.py
===========
Scoped overrides: logger levels, and the backend used by ``Region.contains``.
Each context manager puts the previous value back on exit, including when
the body raises.
"""

import logging
from contextlib import contextmanager
from typing import Optional

from ._backend import resolve_backend


# Backend forced by an active ``use_backend`` block, or None.
_backend_override: Optional[str] = None


@contextmanager
def suppress_logger(logger_name: str, level: int = logging.CRITICAL):
    """
    Set *logger_name* to *level* for the duration of the block.

    >>> with suppress_logger('geoprior._logging', logging.ERROR):
    ...     region = Region(raster)          # no coverage summary
    """
    logger = logging.getLogger(logger_name)
    previous = logger.level
    try:
        logger.setLevel(level)
        yield
    finally:
        logger.setLevel(previous)


@contextmanager
def quiet(level: int = logging.CRITICAL):
    """
    ``suppress_logger`` applied to the package logger ``'geoprior'``.

    Module loggers inherit from it, so region summaries, multifurcation
    warnings and prior target messages are all held back.  Pass
    ``logging.WARNING`` to keep warnings but drop INFO chatter.

    >>> with quiet():
    ...     prior.evaluate()
    """
    with suppress_logger("geoprior", level):
        yield


@contextmanager
def use_backend(backend: str):
    """
    Make every ``Region.contains`` call inside the block use *backend*,
    whatever its own ``backend=`` argument says.

    Raises
    ------
    ValueError
        If *backend* is not available (checked on entry).

    >>> with use_backend('python'):
    ...     mask = region.contains(lats, longs)
    """
    global _backend_override

    if backend != "best":
        resolve_backend(backend)

    previous = _backend_override
    try:
        _backend_override = backend
        yield
    finally:
        _backend_override = previous


def get_backend_override() -> Optional[str]:
    """Backend set by the innermost active ``use_backend``, or None."""
    return _backend_override
