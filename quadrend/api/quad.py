"""Value types shared by the quad transform core and its GPU glue."""

from __future__ import annotations

import math
import numbers
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, IntEnum

from quadrend.runtime.errors import CornerIndexError, InvalidQuadError, InvalidViewportExtentError

UINT32_MAX = 0xFFFFFFFF


class ExtentUnit(str, Enum):
    """Encoding of a viewport extent in the uniform block."""

    FLOAT_PIXELS = "float"
    INTEGER_PIXELS = "uint"


class InputMode(str, Enum):
    """How rectangle geometry reaches the vertex program."""

    INSTANCED_RECT = "instanced"
    PRECOMPUTED_CORNERS = "precomputed"

    @property
    def extent_unit(self) -> ExtentUnit:
        if self is InputMode.PRECOMPUTED_CORNERS:
            return ExtentUnit.INTEGER_PIXELS
        return ExtentUnit.FLOAT_PIXELS


@dataclass(frozen=True, slots=True)
class ViewportExtent:
    """Render target size in pixels, tagged with its uniform encoding.

    Both components must be finite and strictly positive. Integer-pixel
    extents must additionally be whole numbers that fit in uint32.
    """

    width: float
    height: float
    unit: ExtentUnit = ExtentUnit.FLOAT_PIXELS

    def __post_init__(self) -> None:
        for name, value in (("width", self.width), ("height", self.height)):
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidViewportExtentError(f"viewport {name} must be a number, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise InvalidViewportExtentError(f"viewport {name} must be > 0, got {value!r}")
            if self.unit is ExtentUnit.INTEGER_PIXELS:
                if float(value) != int(value):
                    raise InvalidViewportExtentError(
                        f"integer-pixel viewport {name} must be integral, got {value!r}"
                    )
                if int(value) > UINT32_MAX:
                    raise InvalidViewportExtentError(f"viewport {name} exceeds uint32: {value!r}")
                object.__setattr__(self, name, int(value))
            else:
                object.__setattr__(self, name, float(value))

    @classmethod
    def from_size(
        cls, size: Sequence[float], unit: ExtentUnit = ExtentUnit.FLOAT_PIXELS
    ) -> "ViewportExtent":
        """Build from a ``(width, height)`` pair such as a window resize payload."""
        if len(size) < 2:
            raise InvalidViewportExtentError(f"expected (width, height), got {size!r}")
        return cls(size[0], size[1], unit)

    def as_unit(self, unit: ExtentUnit) -> "ViewportExtent":
        if unit is self.unit:
            return self
        return ViewportExtent(self.width, self.height, unit)

    def as_tuple(self) -> tuple[float, float]:
        return (self.width, self.height)


@dataclass(frozen=True, slots=True)
class QuadRect:
    """Axis-aligned rectangle in pixel space, y growing downward."""

    x: float
    y: float
    w: float
    h: float

    def __post_init__(self) -> None:
        if not all(math.isfinite(value) for value in (self.x, self.y, self.w, self.h)):
            raise InvalidQuadError(f"rectangle must be finite, got {self.as_tuple()}")
        if self.w < 0 or self.h < 0:
            raise InvalidQuadError(f"rectangle size must be >= 0, got ({self.w}, {self.h})")

    @property
    def is_degenerate(self) -> bool:
        return self.w == 0 or self.h == 0

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.w, self.h)


@dataclass(frozen=True, slots=True)
class Rgba:
    """Linear color; components are not range-checked."""

    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def from_rgb255(cls, r: float, g: float, b: float, a: float = 1.0) -> "Rgba":
        """Scale 0-255 color channels into [0, 1]; alpha is taken as-is."""
        return cls(r / 255.0, g / 255.0, b / 255.0, a)

    @classmethod
    def from_hex(cls, raw: str) -> "Rgba":
        normalized = raw.strip().lower()
        if not normalized.startswith("#"):
            raise ValueError(f"hex color must start with '#': {raw!r}")
        value = normalized.removeprefix("#")
        if len(value) in (3, 4):
            value = "".join(ch * 2 for ch in value)
        if len(value) == 6:
            value = f"{value}ff"
        if len(value) != 8:
            raise ValueError(f"unsupported hex color length: {raw!r}")
        channels = tuple(int(value[index:index + 2], 16) for index in range(0, 8, 2))
        return cls(
            channels[0] / 255.0,
            channels[1] / 255.0,
            channels[2] / 255.0,
            channels[3] / 255.0,
        )

    def scaled(self, factor: float) -> "Rgba":
        """Multiply the color channels, keeping alpha."""
        return Rgba(self.r * factor, self.g * factor, self.b * factor, self.a)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)


class Corner(IntEnum):
    """Index into the four-entry corner table."""

    TOP_LEFT = 0
    TOP_RIGHT = 1
    BOTTOM_LEFT = 2
    BOTTOM_RIGHT = 3

    @classmethod
    def from_counter(cls, counter: int, *, wrap: bool = False) -> "Corner":
        """Map a per-instance vertex counter to a corner.

        ``wrap=True`` reproduces the GPU program's ``counter % 4``; otherwise a
        counter outside ``0..3`` raises ``CornerIndexError``.
        """
        if wrap:
            return cls(counter % len(cls))
        if not 0 <= counter < len(cls):
            raise CornerIndexError(f"corner counter out of range 0..3: {counter}")
        return cls(counter)


@dataclass(frozen=True, slots=True)
class ClipPosition:
    x: float
    y: float
    z: float = 0.0
    w: float = 1.0

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.z, self.w)


@dataclass(frozen=True, slots=True)
class Quad:
    """One instance: rectangle geometry plus its flat color."""

    rect: QuadRect
    color: Rgba

    @classmethod
    def of(cls, x: float, y: float, w: float, h: float, color: Rgba) -> "Quad":
        return cls(QuadRect(x, y, w, h), color)


__all__ = [
    "ClipPosition",
    "Corner",
    "ExtentUnit",
    "InputMode",
    "Quad",
    "QuadRect",
    "Rgba",
    "UINT32_MAX",
    "ViewportExtent",
]
