"""Named batch of quads backed by one growable GPU vertex buffer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import cast

from quadrend.api.quad import InputMode, Quad
from quadrend.rendering.layout import VERTICES_PER_INSTANCE, VERTICES_PER_QUAD, bytes_per_quad, pack_quads

_LOG = logging.getLogger(__name__)

MIN_BUFFER_BYTES = 256


@dataclass(slots=True)
class QuadLayer:
    """Quads drawn together with one vertex buffer and one draw call."""

    name: str
    device: object
    mode: InputMode = InputMode.INSTANCED_RECT
    label: str = "quadrend.layer"
    reserve: int = 0
    buffer_usage: int = 0x20 | 0x08  # VERTEX | COPY_DST
    min_buffer_bytes: int = MIN_BUFFER_BYTES
    _quads: list[Quad] = field(init=False, default_factory=list)
    _buffer: object | None = field(init=False, default=None)
    _byte_cap: int = field(init=False, default=0)
    _uploaded: int = field(init=False, default=0)
    _changed: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        if self.reserve > 0:
            self._ensure_capacity(self.reserve * bytes_per_quad(self.mode))

    def __len__(self) -> int:
        return len(self._quads)

    @property
    def is_empty(self) -> bool:
        return not self._quads

    @property
    def quads(self) -> tuple[Quad, ...]:
        return tuple(self._quads)

    @property
    def byte_cap(self) -> int:
        return self._byte_cap

    @property
    def buffer(self) -> object | None:
        return self._buffer

    @property
    def changed(self) -> bool:
        return self._changed

    @property
    def vertex_count(self) -> int:
        if self.mode is InputMode.PRECOMPUTED_CORNERS:
            return self._uploaded * VERTICES_PER_QUAD
        return VERTICES_PER_INSTANCE

    @property
    def instance_count(self) -> int:
        if self.mode is InputMode.PRECOMPUTED_CORNERS:
            return 1
        return self._uploaded

    def set_quads(self, quads: list[Quad]) -> None:
        self._quads = list(quads)
        self._changed = True

    def push(self, quad: Quad) -> None:
        self._quads.append(quad)
        self._changed = True

    def clear(self) -> None:
        self._quads.clear()
        self._changed = True

    def prepare(self, queue: object) -> bool:
        """Upload pending quads; returns True when bytes were written."""
        if not self._changed:
            return False
        if not self._quads:
            self._uploaded = 0
            self._changed = False
            return False
        write_buffer = getattr(queue, "write_buffer", None)
        if not callable(write_buffer):
            raise TypeError("queue does not support write_buffer")
        # Packing may reject geometry; the previous upload stays drawable.
        raw = pack_quads(self._quads, self.mode).tobytes()
        buffer = self._ensure_capacity(len(raw))
        write_buffer(buffer, 0, raw)
        self._uploaded = len(self._quads)
        self._changed = False
        return True

    def render(self, render_pass: object) -> bool:
        """Draw what the last successful ``prepare`` uploaded."""
        if self._buffer is None or self._uploaded <= 0:
            return False
        set_vertex_buffer = getattr(render_pass, "set_vertex_buffer")
        draw = getattr(render_pass, "draw")
        set_vertex_buffer(0, self._buffer)
        draw(self.vertex_count, self.instance_count, 0, 0)
        return True

    def release(self) -> None:
        buffer = self._buffer
        self._buffer = None
        self._byte_cap = 0
        self._uploaded = 0
        destroy = getattr(buffer, "destroy", None)
        if callable(destroy):
            destroy()

    def _ensure_capacity(self, minimum_bytes: int) -> object:
        required = max(int(self.min_buffer_bytes), int(minimum_bytes))
        if self._buffer is not None and self._byte_cap >= required:
            return self._buffer
        capacity = max(4, int(self.min_buffer_bytes))
        while capacity < required:
            capacity *= 2
        create_buffer = getattr(self.device, "create_buffer")
        previous = self._buffer
        self._buffer = cast(
            object,
            create_buffer(
                label=f"{self.label}.{self.name}",
                size=capacity,
                usage=self.buffer_usage,
                mapped_at_creation=False,
            ),
        )
        _LOG.debug(
            "layer_buffer_grow layer=%s old_cap=%d new_cap=%d",
            self.name,
            self._byte_cap,
            capacity,
        )
        self._byte_cap = capacity
        destroy = getattr(previous, "destroy", None)
        if callable(destroy):
            destroy()
        return self._buffer
