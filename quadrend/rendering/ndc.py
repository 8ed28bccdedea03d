"""Pixel-space to normalized-device-coordinate mapping."""

from __future__ import annotations

import numpy as np

from quadrend.api.quad import ClipPosition, ViewportExtent


def pixel_to_ndc(px: float, py: float, extent: ViewportExtent) -> tuple[float, float]:
    """Map a pixel point into NDC, flipping y so that screen-down becomes NDC-down."""
    width = float(extent.width)
    height = float(extent.height)
    ndc_x = (px / width) * 2.0 - 1.0
    ndc_y = 1.0 - (py / height) * 2.0
    return ndc_x, ndc_y


def to_clip_position(px: float, py: float, extent: ViewportExtent) -> ClipPosition:
    ndc_x, ndc_y = pixel_to_ndc(px, py, extent)
    return ClipPosition(ndc_x, ndc_y, 0.0, 1.0)


def pixels_to_ndc(points: np.ndarray, extent: ViewportExtent) -> np.ndarray:
    """Float32 batch form of :func:`pixel_to_ndc` for arrays shaped ``(..., 2)``."""
    pts = np.asarray(points, dtype=np.float32)
    size = np.array(extent.as_tuple(), dtype=np.float32)
    scaled = (pts / size) * np.float32(2.0)
    out = np.empty_like(scaled)
    out[..., 0] = scaled[..., 0] - np.float32(1.0)
    out[..., 1] = np.float32(1.0) - scaled[..., 1]
    return out


def ortho_projection(extent: ViewportExtent) -> np.ndarray:
    """Row-major 4x4 matrix equivalent to :func:`pixel_to_ndc`.

    Scales both axes into [-1, 1] and negates y; ``projection @ (px, py, 0, 1)``
    yields the clip position. Transpose before uploading as a WGSL ``mat4x4``.
    """
    w = float(extent.width)
    h = float(extent.height)
    return np.array(
        (
            (2.0 / w, 0.0, 0.0, -1.0),
            (0.0, -2.0 / h, 0.0, 1.0),
            (0.0, 0.0, 1.0, 0.0),
            (0.0, 0.0, 0.0, 1.0),
        ),
        dtype=np.float32,
    )
