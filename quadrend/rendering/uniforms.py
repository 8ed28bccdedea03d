"""Uniform transform provider: the viewport extent shared by one draw."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from quadrend.api.quad import ExtentUnit, ViewportExtent
from quadrend.rendering.layout import pack_uniform_block
from quadrend.runtime.errors import UniformsLockedError, UniformsUnsetError

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Uniforms:
    """Read-only uniform block value for every invocation of a draw."""

    extent: ViewportExtent

    def pack(self, unit: ExtentUnit | None = None) -> bytes:
        extent = self.extent if unit is None else self.extent.as_unit(unit)
        return pack_uniform_block(extent)


@dataclass(slots=True)
class UniformTransformProvider:
    """Holds the host's current extent and freezes it for the duration of a draw."""

    _uniforms: Uniforms | None = field(init=False, default=None)
    _draw_active: bool = field(init=False, default=False)
    _revision: int = field(init=False, default=0)

    @property
    def uniforms(self) -> Uniforms:
        if self._uniforms is None:
            raise UniformsUnsetError("viewport extent was never set")
        return self._uniforms

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def draw_active(self) -> bool:
        return self._draw_active

    def set_extent(self, extent: ViewportExtent) -> Uniforms:
        if self._draw_active:
            raise UniformsLockedError("uniforms are read-only while a draw is active")
        if self._uniforms is not None and self._uniforms.extent == extent:
            return self._uniforms
        self._uniforms = Uniforms(extent)
        self._revision += 1
        _LOG.debug(
            "uniforms_updated width=%s height=%s unit=%s revision=%d",
            extent.width,
            extent.height,
            extent.unit.value,
            self._revision,
        )
        return self._uniforms

    @contextmanager
    def draw(self) -> Iterator[Uniforms]:
        uniforms = self.uniforms
        if self._draw_active:
            raise UniformsLockedError("draw already active")
        self._draw_active = True
        try:
            yield uniforms
        finally:
            self._draw_active = False
