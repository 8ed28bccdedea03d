"""Corner selection: one rectangle descriptor expands to four pixel corners."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from quadrend.api.quad import Corner, QuadRect

# Unit offsets scaled by (w, h), indexed by Corner.
CORNER_OFFSETS: tuple[tuple[float, float], ...] = (
    (0.0, 0.0),
    (1.0, 0.0),
    (0.0, 1.0),
    (1.0, 1.0),
)

# Vertex order of the two triangles per quad in triangle-list draws.
TRIANGLE_LIST_ORDER: tuple[Corner, ...] = (
    Corner.TOP_LEFT,
    Corner.BOTTOM_LEFT,
    Corner.BOTTOM_RIGHT,
    Corner.TOP_RIGHT,
    Corner.TOP_LEFT,
    Corner.BOTTOM_RIGHT,
)

_OFFSETS_ARRAY = np.array(CORNER_OFFSETS, dtype=np.float32)


def select_corner(rect: QuadRect, corner: Corner) -> tuple[float, float]:
    """Return the pixel-space point for one corner of ``rect``."""
    ox, oy = CORNER_OFFSETS[corner]
    px = rect.x + rect.w if ox else rect.x
    py = rect.y + rect.h if oy else rect.y
    return px, py


def corner_for_vertex(rect: QuadRect, counter: int, *, wrap: bool = False) -> tuple[float, float]:
    return select_corner(rect, Corner.from_counter(counter, wrap=wrap))


def quad_corners(rect: QuadRect) -> tuple[tuple[float, float], ...]:
    """Corners in index order: top-left, top-right, bottom-left, bottom-right."""
    return tuple(select_corner(rect, corner) for corner in Corner)


def triangle_list_corners(rect: QuadRect) -> tuple[tuple[float, float], ...]:
    return tuple(select_corner(rect, corner) for corner in TRIANGLE_LIST_ORDER)


def corner_arrays(rects: Iterable[QuadRect] | np.ndarray) -> np.ndarray:
    """Vectorized corner expansion.

    Accepts ``QuadRect`` values or an ``(N, 4)`` array of ``x, y, w, h`` and
    returns an ``(N, 4, 2)`` float32 array in corner index order.
    """
    if isinstance(rects, np.ndarray):
        geometry = rects.astype(np.float32, copy=False).reshape(-1, 4)
    else:
        geometry = np.array([rect.as_tuple() for rect in rects], dtype=np.float32).reshape(-1, 4)
    origin = geometry[:, np.newaxis, 0:2]
    size = geometry[:, np.newaxis, 2:4]
    return origin + size * _OFFSETS_ARRAY[np.newaxis, :, :]
