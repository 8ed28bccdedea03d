"""WGSL programs for both quad input modes."""

from __future__ import annotations

from quadrend.api.quad import InputMode

VERTEX_ENTRY_POINT = "vs_main"
FRAGMENT_ENTRY_POINT = "fs_main"

# Canonical mode: one {color, rect} record per instance, four vertices each.
INSTANCED_RECT_WGSL = """
struct Uniforms {
    width: f32,
    height: f32,
};

@group(0) @binding(0) var<uniform> uniforms: Uniforms;

struct InstanceIn {
    @location(0) color: vec4<f32>,
    @location(1) rect: vec4<f32>,
};

struct VsOut {
    @builtin(position) position: vec4<f32>,
    @location(0) color: vec4<f32>,
};

@vertex
fn vs_main(@builtin(vertex_index) vertex_index: u32, input: InstanceIn) -> VsOut {
    var corners = array<vec2<f32>, 4>(
        vec2<f32>(0.0, 0.0),
        vec2<f32>(1.0, 0.0),
        vec2<f32>(0.0, 1.0),
        vec2<f32>(1.0, 1.0),
    );
    let pixel = input.rect.xy + input.rect.zw * corners[vertex_index % 4u];
    var out: VsOut;
    out.position = vec4<f32>(
        (pixel.x / uniforms.width) * 2.0 - 1.0,
        1.0 - (pixel.y / uniforms.height) * 2.0,
        0.0,
        1.0,
    );
    out.color = input.color;
    return out;
}

@fragment
fn fs_main(input: VsOut) -> @location(0) vec4<f32> {
    return input.color;
}
"""

# Alternate mode: corners expanded on the host into uint32 pixel positions.
PRECOMPUTED_CORNERS_WGSL = """
struct Uniforms {
    bounds: vec2<u32>,
};

@group(0) @binding(0) var<uniform> uniforms: Uniforms;

struct VsIn {
    @location(0) color: vec4<f32>,
    @location(1) position: vec2<u32>,
};

struct VsOut {
    @builtin(position) position: vec4<f32>,
    @location(0) color: vec4<f32>,
};

@vertex
fn vs_main(input: VsIn) -> VsOut {
    let pixel = vec2<f32>(input.position);
    let bounds = vec2<f32>(uniforms.bounds);
    var out: VsOut;
    out.position = vec4<f32>(
        (pixel.x / bounds.x) * 2.0 - 1.0,
        1.0 - (pixel.y / bounds.y) * 2.0,
        0.0,
        1.0,
    );
    out.color = input.color;
    return out;
}

@fragment
fn fs_main(input: VsOut) -> @location(0) vec4<f32> {
    return input.color;
}
"""


def shader_source(mode: InputMode) -> str:
    if mode is InputMode.PRECOMPUTED_CORNERS:
        return PRECOMPUTED_CORNERS_WGSL
    return INSTANCED_RECT_WGSL
