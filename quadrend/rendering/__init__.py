"""Quad transform core and its wgpu binding."""

from quadrend.rendering.corners import quad_corners, select_corner
from quadrend.rendering.fragment import shade_fragment
from quadrend.rendering.ndc import pixel_to_ndc, to_clip_position
from quadrend.rendering.pipeline import VertexOutput, clip_positions, run_instanced, run_precomputed
from quadrend.rendering.quad_layer import QuadLayer
from quadrend.rendering.uniforms import Uniforms, UniformTransformProvider
from quadrend.rendering.wgpu_renderer import QuadRenderer, request_device

__all__ = [
    "QuadLayer",
    "QuadRenderer",
    "Uniforms",
    "UniformTransformProvider",
    "VertexOutput",
    "clip_positions",
    "pixel_to_ndc",
    "quad_corners",
    "request_device",
    "run_instanced",
    "run_precomputed",
    "select_corner",
    "shade_fragment",
    "to_clip_position",
]
