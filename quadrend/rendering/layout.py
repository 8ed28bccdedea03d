"""Binary layout contract between host buffers and the quad programs."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from quadrend.api.quad import UINT32_MAX, ExtentUnit, InputMode, Quad, ViewportExtent
from quadrend.rendering.corners import TRIANGLE_LIST_ORDER, select_corner
from quadrend.runtime.errors import InvalidQuadError

VERTICES_PER_INSTANCE = 4
VERTICES_PER_QUAD = 6

FLOAT_UNIFORM_DTYPE = np.dtype([("width", "<f4"), ("height", "<f4")])
UINT_UNIFORM_DTYPE = np.dtype([("bounds_x", "<u4"), ("bounds_y", "<u4")])
UNIFORM_BLOCK_SIZE = 8

INSTANCE_DTYPE = np.dtype([("color", "<f4", (4,)), ("rect", "<f4", (4,))])
PRECOMPUTED_VERTEX_DTYPE = np.dtype([("color", "<f4", (4,)), ("position", "<u4", (2,))])


def uniform_dtype(unit: ExtentUnit) -> np.dtype:
    if unit is ExtentUnit.INTEGER_PIXELS:
        return UINT_UNIFORM_DTYPE
    return FLOAT_UNIFORM_DTYPE


def pack_uniform_block(extent: ViewportExtent) -> bytes:
    """Encode the extent as the 8-byte uniform block matching its unit tag."""
    block = np.zeros(1, dtype=uniform_dtype(extent.unit))
    block[0] = extent.as_tuple()
    return block.tobytes()


def pack_instances(quads: Sequence[Quad]) -> np.ndarray:
    """One ``{color, rect}`` record per quad, 32 bytes each."""
    records = np.zeros(len(quads), dtype=INSTANCE_DTYPE)
    for index, quad in enumerate(quads):
        records["color"][index] = quad.color.as_tuple()
        records["rect"][index] = quad.rect.as_tuple()
    return records


def pack_precomputed_vertices(quads: Sequence[Quad]) -> np.ndarray:
    """Six ``{color, position}`` records per quad with uint32 pixel positions."""
    records = np.zeros(len(quads) * VERTICES_PER_QUAD, dtype=PRECOMPUTED_VERTEX_DTYPE)
    cursor = 0
    for quad in quads:
        _require_uint_geometry(quad)
        color = quad.color.as_tuple()
        for corner in TRIANGLE_LIST_ORDER:
            px, py = select_corner(quad.rect, corner)
            records["color"][cursor] = color
            records["position"][cursor] = (int(px), int(py))
            cursor += 1
    return records


def pack_quads(quads: Sequence[Quad], mode: InputMode) -> np.ndarray:
    if mode is InputMode.PRECOMPUTED_CORNERS:
        return pack_precomputed_vertices(quads)
    return pack_instances(quads)


def bytes_per_quad(mode: InputMode) -> int:
    if mode is InputMode.PRECOMPUTED_CORNERS:
        return VERTICES_PER_QUAD * PRECOMPUTED_VERTEX_DTYPE.itemsize
    return INSTANCE_DTYPE.itemsize


def primitive_topology(mode: InputMode) -> str:
    if mode is InputMode.PRECOMPUTED_CORNERS:
        return "triangle-list"
    return "triangle-strip"


def vertex_buffer_layout(mode: InputMode) -> dict[str, object]:
    """wgpu vertex buffer layout for ``mode``."""
    if mode is InputMode.PRECOMPUTED_CORNERS:
        return {
            "array_stride": PRECOMPUTED_VERTEX_DTYPE.itemsize,
            "step_mode": "vertex",
            "attributes": [
                {"shader_location": 0, "offset": 0, "format": "float32x4"},
                {"shader_location": 1, "offset": 16, "format": "uint32x2"},
            ],
        }
    return {
        "array_stride": INSTANCE_DTYPE.itemsize,
        "step_mode": "instance",
        "attributes": [
            {"shader_location": 0, "offset": 0, "format": "float32x4"},
            {"shader_location": 1, "offset": 16, "format": "float32x4"},
        ],
    }


def _require_uint_geometry(quad: Quad) -> None:
    rect = quad.rect
    for name, value in (("x", rect.x), ("y", rect.y), ("right", rect.x + rect.w), ("bottom", rect.y + rect.h)):
        if value < 0 or float(value) != int(value) or int(value) > UINT32_MAX:
            raise InvalidQuadError(
                f"precomputed corners need whole non-negative uint32 pixels; {name}={value!r}"
            )
