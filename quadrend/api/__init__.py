"""Public quadrend API contracts."""

from quadrend.api.logging import QuadrendLoggingConfig
from quadrend.api.quad import (
    ClipPosition,
    Corner,
    ExtentUnit,
    InputMode,
    Quad,
    QuadRect,
    Rgba,
    ViewportExtent,
)

__all__ = [
    "ClipPosition",
    "Corner",
    "ExtentUnit",
    "InputMode",
    "Quad",
    "QuadRect",
    "QuadrendLoggingConfig",
    "Rgba",
    "ViewportExtent",
]
