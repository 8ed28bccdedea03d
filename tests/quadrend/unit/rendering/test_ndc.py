from __future__ import annotations

import numpy as np
import pytest

from quadrend.api.quad import ClipPosition, ExtentUnit, ViewportExtent
from quadrend.rendering.ndc import ortho_projection, pixel_to_ndc, pixels_to_ndc, to_clip_position
from quadrend.runtime.errors import InvalidViewportExtentError


def test_pixel_to_ndc_reference_point() -> None:
    ndc_x, ndc_y = pixel_to_ndc(100.0, 50.0, ViewportExtent(800.0, 600.0))
    assert ndc_x == pytest.approx(-0.75, abs=1e-5)
    assert ndc_y == pytest.approx(0.8333333, abs=1e-5)


def test_pixel_to_ndc_maps_viewport_corners_to_unit_square() -> None:
    extent = ViewportExtent(800.0, 600.0)
    assert pixel_to_ndc(0.0, 0.0, extent) == (-1.0, 1.0)
    assert pixel_to_ndc(800.0, 600.0, extent) == (1.0, -1.0)
    assert pixel_to_ndc(400.0, 300.0, extent) == (0.0, 0.0)


def test_y_flip_law_increasing_py_decreases_ndc_y() -> None:
    extent = ViewportExtent(640.0, 480.0)
    values = [pixel_to_ndc(10.0, py, extent)[1] for py in range(0, 481, 16)]
    assert all(later < earlier for earlier, later in zip(values, values[1:]))


def test_x_scale_law_increasing_px_increases_ndc_x() -> None:
    extent = ViewportExtent(640.0, 480.0)
    values = [pixel_to_ndc(px, 10.0, extent)[0] for px in range(0, 641, 16)]
    assert all(later > earlier for earlier, later in zip(values, values[1:]))


def test_integer_pixel_extent_maps_identically() -> None:
    float_extent = ViewportExtent(1024.0, 768.0)
    uint_extent = float_extent.as_unit(ExtentUnit.INTEGER_PIXELS)
    assert pixel_to_ndc(17.0, 300.0, uint_extent) == pixel_to_ndc(17.0, 300.0, float_extent)


def test_to_clip_position_fixes_z_and_w() -> None:
    clip = to_clip_position(100.0, 50.0, ViewportExtent(800.0, 600.0))
    assert isinstance(clip, ClipPosition)
    assert clip.z == 0.0
    assert clip.w == 1.0


def test_pixels_to_ndc_batch_matches_scalar_within_float32() -> None:
    extent = ViewportExtent(800.0, 600.0)
    points = np.array([[100.0, 50.0], [0.0, 600.0], [799.0, 1.0]], dtype=np.float32)
    batch = pixels_to_ndc(points, extent)
    assert batch.dtype == np.float32
    for row, (px, py) in zip(batch, points.tolist()):
        assert tuple(row.tolist()) == pytest.approx(pixel_to_ndc(px, py, extent), abs=1e-6)


def test_ortho_projection_is_equivalent_to_direct_formula() -> None:
    extent = ViewportExtent(800.0, 600.0)
    projection = ortho_projection(extent)
    for px, py in [(100.0, 50.0), (0.0, 0.0), (800.0, 600.0), (333.0, 123.0)]:
        clip = projection @ np.array([px, py, 0.0, 1.0], dtype=np.float32)
        ndc_x, ndc_y = pixel_to_ndc(px, py, extent)
        assert clip.tolist() == pytest.approx([ndc_x, ndc_y, 0.0, 1.0], abs=1e-6)


def test_zero_extent_is_rejected_before_any_division() -> None:
    with pytest.raises(InvalidViewportExtentError):
        pixel_to_ndc(1.0, 1.0, ViewportExtent(0.0, 600.0))


def test_ortho_projection_is_row_major_with_translation_in_last_column() -> None:
    projection = ortho_projection(ViewportExtent(800.0, 600.0))
    assert projection.shape == (4, 4)
    assert projection.dtype == np.float32
    assert projection[:, 3].tolist() == pytest.approx([-1.0, 1.0, 0.0, 1.0])
    assert projection.T[3].tolist() == pytest.approx([-1.0, 1.0, 0.0, 1.0])
    assert projection[3, :3].tolist() == [0.0, 0.0, 0.0]
