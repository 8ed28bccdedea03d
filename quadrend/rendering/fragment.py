"""Fragment stage: interpolated color passes through untouched."""

from __future__ import annotations

import numpy as np

from quadrend.api.quad import Rgba


def shade_fragment(color: Rgba) -> Rgba:
    return color


def shade_fragments(colors: np.ndarray) -> np.ndarray:
    return colors
