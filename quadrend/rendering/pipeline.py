"""CPU reference of the quad vertex and fragment programs.

Each function here is the per-invocation body the GPU runs for one vertex or
fragment, so results can be checked without a device. ``clip_positions`` is
the float32 batch form and matches GPU precision.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from quadrend.api.quad import ClipPosition, Quad, QuadRect, Rgba, ViewportExtent
from quadrend.rendering.corners import corner_arrays, corner_for_vertex
from quadrend.rendering.fragment import shade_fragment
from quadrend.rendering.layout import PRECOMPUTED_VERTEX_DTYPE, VERTICES_PER_INSTANCE
from quadrend.rendering.ndc import pixels_to_ndc, to_clip_position
from quadrend.rendering.uniforms import Uniforms


@dataclass(frozen=True, slots=True)
class VertexOutput:
    position: ClipPosition
    color: Rgba


def vertex_stage(uniforms: Uniforms, quad: Quad, vertex_index: int, *, wrap: bool = False) -> VertexOutput:
    """One invocation of the instanced vertex program."""
    px, py = corner_for_vertex(quad.rect, vertex_index, wrap=wrap)
    return VertexOutput(to_clip_position(px, py, uniforms.extent), quad.color)


def precomputed_vertex_stage(uniforms: Uniforms, color: Rgba, px: int, py: int) -> VertexOutput:
    """One invocation of the precomputed-corner vertex program."""
    return VertexOutput(to_clip_position(float(px), float(py), uniforms.extent), color)


def fragment_stage(output: VertexOutput) -> Rgba:
    return shade_fragment(output.color)


def run_instanced(uniforms: Uniforms, quads: Iterable[Quad]) -> tuple[tuple[VertexOutput, ...], ...]:
    return tuple(
        tuple(vertex_stage(uniforms, quad, index) for index in range(VERTICES_PER_INSTANCE))
        for quad in quads
    )


def run_precomputed(uniforms: Uniforms, vertices: np.ndarray) -> tuple[VertexOutput, ...]:
    if vertices.dtype != PRECOMPUTED_VERTEX_DTYPE:
        raise TypeError(f"expected {PRECOMPUTED_VERTEX_DTYPE}, got {vertices.dtype}")
    outputs: list[VertexOutput] = []
    for record in vertices:
        r, g, b, a = (float(channel) for channel in record["color"])
        px, py = (int(value) for value in record["position"])
        outputs.append(precomputed_vertex_stage(uniforms, Rgba(r, g, b, a), px, py))
    return tuple(outputs)


def clip_positions(extent: ViewportExtent, rects: Sequence[QuadRect] | np.ndarray) -> np.ndarray:
    """Batch vertex stage: ``(N, 4, 4)`` float32 clip positions."""
    corners = corner_arrays(rects)
    ndc = pixels_to_ndc(corners, extent)
    out = np.zeros(ndc.shape[:-1] + (4,), dtype=np.float32)
    out[..., 0:2] = ndc
    out[..., 3] = 1.0
    return out
