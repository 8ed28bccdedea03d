"""Exception types and the shared recoverable-error policy."""

from __future__ import annotations

import logging
from typing import TypeAlias


class QuadrendError(Exception):
    """Base class for all errors raised by quadrend."""


class InvalidViewportExtentError(QuadrendError, ValueError):
    """Viewport extent is not strictly positive, finite, or representable."""


class InvalidQuadError(QuadrendError, ValueError):
    """Rectangle geometry cannot be encoded."""


class CornerIndexError(QuadrendError, IndexError):
    """Per-instance vertex counter is outside the four-corner table."""


class UniformsLockedError(QuadrendError, RuntimeError):
    """Uniforms were mutated while a draw was in progress."""


class UniformsUnsetError(QuadrendError, RuntimeError):
    """A draw was requested before the host provided a viewport extent."""


class QuadrendInitError(QuadrendError, RuntimeError):
    """GPU setup failure with structured details."""

    def __init__(self, message: str, *, details: dict[str, object]) -> None:
        super().__init__(message)
        self.details = details


# Explicitly bounded set tolerated by best-effort cleanup paths.
RecoverableRuntimeErrors: TypeAlias = tuple[type[BaseException], ...]
RECOVERABLE_RUNTIME_ERRORS: RecoverableRuntimeErrors = (
    RuntimeError,
    OSError,
    ValueError,
    TypeError,
    AttributeError,
)


def log_recoverable(
    logger: logging.Logger,
    message: str,
    *,
    level: int = logging.DEBUG,
) -> None:
    """Emit structured observability for tolerated recoverable exceptions."""
    logger.log(level, message, exc_info=True)
