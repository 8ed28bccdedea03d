"""Axis-aligned colored quads rendered through wgpu."""

from quadrend.api.quad import ExtentUnit, InputMode, Quad, QuadRect, Rgba, ViewportExtent

__all__ = ["ExtentUnit", "InputMode", "Quad", "QuadRect", "Rgba", "ViewportExtent"]
