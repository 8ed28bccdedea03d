"""wgpu binding for the quad programs: uniforms, pipeline and ordered layers."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from types import ModuleType

from quadrend.api.quad import InputMode, Quad, ViewportExtent
from quadrend.rendering.layout import UNIFORM_BLOCK_SIZE, primitive_topology, vertex_buffer_layout
from quadrend.rendering.quad_layer import MIN_BUFFER_BYTES, QuadLayer
from quadrend.rendering.shaders import FRAGMENT_ENTRY_POINT, VERTEX_ENTRY_POINT, shader_source
from quadrend.rendering.uniforms import Uniforms, UniformTransformProvider
from quadrend.runtime.config import QuadrendConfig, load_config
from quadrend.runtime.errors import (
    RECOVERABLE_RUNTIME_ERRORS,
    QuadrendInitError,
    log_recoverable,
)

_LOG = logging.getLogger(__name__)


@dataclass(slots=True)
class QuadRenderer:
    """Draws ordered quad layers on a host-owned wgpu device.

    The host keeps the surface, the command encoder and the render pass; this
    object owns only the uniform buffer, bind group, pipeline and the layers'
    vertex buffers.
    """

    device: object
    surface_format: str
    extent: ViewportExtent
    mode: InputMode = InputMode.INSTANCED_RECT
    label: str = "quadrend"
    color_target: dict[str, object] | None = None
    layer_min_bytes: int = MIN_BUFFER_BYTES
    _wgpu: ModuleType = field(init=False)
    _queue: object = field(init=False)
    _provider: UniformTransformProvider = field(init=False, default_factory=UniformTransformProvider)
    _uniform_buffer: object = field(init=False)
    _bind_group: object = field(init=False)
    _pipeline: object = field(init=False)
    _layers: dict[str, QuadLayer] = field(init=False, default_factory=dict)
    _uploaded_revision: int = field(init=False, default=0)
    _closed: bool = field(init=False, default=False)

    @classmethod
    def from_config(
        cls,
        device: object,
        surface_format: str,
        extent: ViewportExtent,
        *,
        config: QuadrendConfig | None = None,
        label: str = "quadrend",
    ) -> "QuadRenderer":
        """Build with input mode and layer sizing taken from the environment."""
        resolved = config if config is not None else load_config()
        return cls(
            device=device,
            surface_format=surface_format,
            extent=extent,
            mode=resolved.input_mode,
            label=label,
            layer_min_bytes=resolved.layer_min_bytes,
        )

    def __post_init__(self) -> None:
        self._wgpu = load_wgpu()
        self._queue = getattr(self.device, "queue", None)
        if self._queue is None:
            raise QuadrendInitError("wgpu device queue unavailable", details={"label": self.label})
        self._provider.set_extent(self.extent.as_unit(self.mode.extent_unit))
        try:
            bind_group_layout = self._setup_uniforms()
            self._pipeline = self._setup_pipeline(bind_group_layout)
        except QuadrendInitError:
            raise
        except Exception as exc:
            raise QuadrendInitError(
                "quad pipeline setup failed",
                details={
                    "label": self.label,
                    "mode": self.mode.value,
                    "surface_format": self.surface_format,
                    "exception_type": exc.__class__.__name__,
                    "exception_message": str(exc),
                },
            ) from exc
        self._write_uniforms()
        _LOG.info(
            "quad_renderer_ready label=%s mode=%s format=%s extent=%sx%s",
            self.label,
            self.mode.value,
            self.surface_format,
            self.extent.width,
            self.extent.height,
        )

    @property
    def uniforms(self) -> Uniforms:
        return self._provider.uniforms

    @property
    def pipeline(self) -> object:
        return self._pipeline

    @property
    def layers(self) -> tuple[QuadLayer, ...]:
        return tuple(self._layers.values())

    def resize(self, extent: ViewportExtent) -> None:
        """Replace the viewport extent; only allowed between draws."""
        self._provider.set_extent(extent.as_unit(self.mode.extent_unit))
        self.extent = extent
        self._write_uniforms()

    def create_layer(self, name: str, *, reserve: int = 0) -> QuadLayer:
        return QuadLayer(
            name=name,
            device=self.device,
            mode=self.mode,
            label=f"{self.label}.layer",
            reserve=reserve,
            buffer_usage=_resolve_buffer_usage(self._wgpu),
            min_buffer_bytes=self.layer_min_bytes,
        )

    def push_layer(self, name: str, layer: QuadLayer) -> None:
        """Add or replace a layer; new names draw after existing ones."""
        if layer.mode is not self.mode:
            raise ValueError(f"layer mode {layer.mode.value} does not match renderer mode {self.mode.value}")
        self._layers[name] = layer

    def get_layer(self, name: str) -> QuadLayer | None:
        return self._layers.get(name)

    def push(self, name: str, quad: Quad) -> None:
        layer = self._layers.get(name)
        if layer is None:
            layer = self.create_layer(name)
            self._layers[name] = layer
        layer.push(quad)

    def set_quads(self, name: str, quads: Sequence[Quad]) -> None:
        layer = self._layers.get(name)
        if layer is None:
            layer = self.create_layer(name)
            self._layers[name] = layer
        layer.set_quads(list(quads))

    def prepare(self) -> int:
        """Upload changed layers; returns how many layers were written."""
        self._write_uniforms()
        return sum(1 for layer in self._layers.values() if layer.prepare(self._queue))

    def render(self, render_pass: object) -> int:
        """Record draws for every non-empty layer in insertion order."""
        drawn = 0
        with self._provider.draw():
            set_pipeline = getattr(render_pass, "set_pipeline")
            set_bind_group = getattr(render_pass, "set_bind_group")
            set_pipeline(self._pipeline)
            set_bind_group(0, self._bind_group)
            for layer in self._layers.values():
                if layer.render(render_pass):
                    drawn += 1
        return drawn

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for layer in self._layers.values():
            try:
                layer.release()
            except RECOVERABLE_RUNTIME_ERRORS:
                log_recoverable(_LOG, f"layer release failed: {layer.name}")
        self._layers.clear()
        destroy = getattr(self._uniform_buffer, "destroy", None)
        if callable(destroy):
            try:
                destroy()
            except RECOVERABLE_RUNTIME_ERRORS:
                log_recoverable(_LOG, "uniform buffer release failed")

    def _setup_uniforms(self) -> object:
        device = self.device
        self._uniform_buffer = device.create_buffer(
            label=f"{self.label}.uniform.buffer",
            size=UNIFORM_BLOCK_SIZE,
            usage=_resolve_uniform_usage(self._wgpu),
            mapped_at_creation=False,
        )
        bind_group_layout = device.create_bind_group_layout(
            label=f"{self.label}.uniform.bind_group.layout",
            entries=[
                {
                    "binding": 0,
                    "visibility": _resolve_shader_visibility(self._wgpu),
                    "buffer": {
                        "type": "uniform",
                        "has_dynamic_offset": False,
                        "min_binding_size": UNIFORM_BLOCK_SIZE,
                    },
                }
            ],
        )
        self._bind_group = device.create_bind_group(
            label=f"{self.label}.uniform.bind_group",
            layout=bind_group_layout,
            entries=[
                {
                    "binding": 0,
                    "resource": {
                        "buffer": self._uniform_buffer,
                        "offset": 0,
                        "size": UNIFORM_BLOCK_SIZE,
                    },
                }
            ],
        )
        return bind_group_layout

    def _setup_pipeline(self, bind_group_layout: object) -> object:
        device = self.device
        shader = device.create_shader_module(
            label=f"{self.label}.shader",
            code=shader_source(self.mode),
        )
        pipeline_layout = device.create_pipeline_layout(
            label=f"{self.label}.pipeline_layout",
            bind_group_layouts=[bind_group_layout],
        )
        return device.create_render_pipeline(**self._pipeline_descriptor(shader, pipeline_layout))

    def _pipeline_descriptor(self, shader: object, pipeline_layout: object) -> dict[str, object]:
        color_target = self.color_target
        if color_target is None:
            color_target = {"format": self.surface_format, "write_mask": 0xF}
        return {
            "label": f"{self.label}.pipeline",
            "layout": pipeline_layout,
            "vertex": {
                "module": shader,
                "entry_point": VERTEX_ENTRY_POINT,
                "buffers": [vertex_buffer_layout(self.mode)],
            },
            "primitive": {
                "topology": primitive_topology(self.mode),
                "front_face": "ccw",
                "cull_mode": "none",
            },
            "depth_stencil": None,
            "multisample": {"count": 1, "mask": 0xFFFFFFFF, "alpha_to_coverage_enabled": False},
            "fragment": {
                "module": shader,
                "entry_point": FRAGMENT_ENTRY_POINT,
                "targets": [color_target],
            },
        }

    def _write_uniforms(self) -> None:
        revision = self._provider.revision
        if revision == self._uploaded_revision:
            return
        self._queue.write_buffer(self._uniform_buffer, 0, self._provider.uniforms.pack())
        self._uploaded_revision = revision


def load_wgpu() -> ModuleType:
    try:
        import wgpu
    except Exception as exc:
        raise QuadrendInitError(
            "wgpu dependency unavailable",
            details={
                "exception_type": exc.__class__.__name__,
                "exception_message": str(exc),
            },
        ) from exc
    return wgpu


def request_device(
    backends: Sequence[str] | None = None,
    *,
    power_preference: str = "high-performance",
    label: str = "quadrend.device",
) -> tuple[object, object, str]:
    """Request an adapter (trying ``backends`` in order) and a device.

    ``backends`` defaults to ``QUADREND_WGPU_BACKENDS``. Returns
    ``(adapter, device, selected_backend)``.
    """
    if not backends:
        backends = load_config().wgpu_backends
    wgpu = load_wgpu()
    gpu = getattr(wgpu, "gpu", None)
    if gpu is None:
        raise QuadrendInitError("wgpu.gpu entrypoint unavailable", details={"selected_backend": "unknown"})
    request_adapter = getattr(gpu, "request_adapter_sync", None)
    if not callable(request_adapter):
        request_adapter = getattr(gpu, "request_adapter", None)
    if not callable(request_adapter):
        raise QuadrendInitError("wgpu adapter request API unavailable", details={"selected_backend": "unknown"})
    adapter = None
    selected_backend = "unknown"
    for backend_name in backends:
        selected_backend = str(backend_name)
        try:
            adapter = request_adapter(power_preference=power_preference, backend=backend_name)
        except TypeError:
            adapter = request_adapter(power_preference=power_preference)
        if adapter is not None:
            break
    if adapter is None:
        raise QuadrendInitError(
            "wgpu adapter request returned None",
            details={"selected_backend": selected_backend, "attempted_backends": tuple(backends)},
        )
    request = getattr(adapter, "request_device_sync", None)
    if not callable(request):
        request = getattr(adapter, "request_device", None)
    if not callable(request):
        raise QuadrendInitError("wgpu device request API unavailable", details={"selected_backend": selected_backend})
    device = request(label=label)
    if device is None:
        raise QuadrendInitError("wgpu device request returned None", details={"selected_backend": selected_backend})
    _LOG.info("wgpu_device_ready backend=%s", selected_backend)
    return adapter, device, selected_backend


def _resolve_buffer_usage(wgpu_mod: object) -> int:
    buffer_usage = getattr(wgpu_mod, "BufferUsage", None)
    if buffer_usage is None:
        return 0x20 | 0x08  # VERTEX | COPY_DST fallback
    return int(getattr(buffer_usage, "VERTEX", 0x20)) | int(getattr(buffer_usage, "COPY_DST", 0x08))


def _resolve_uniform_usage(wgpu_mod: object) -> int:
    buffer_usage = getattr(wgpu_mod, "BufferUsage", None)
    if buffer_usage is None:
        return 0x40 | 0x08  # UNIFORM | COPY_DST fallback
    return int(getattr(buffer_usage, "UNIFORM", 0x40)) | int(getattr(buffer_usage, "COPY_DST", 0x08))


def _resolve_shader_visibility(wgpu_mod: object) -> int:
    shader_stage = getattr(wgpu_mod, "ShaderStage", None)
    if shader_stage is None:
        return 0x1 | 0x2  # VERTEX | FRAGMENT fallback
    return int(getattr(shader_stage, "VERTEX", 0x1)) | int(getattr(shader_stage, "FRAGMENT", 0x2))


__all__ = ["QuadRenderer", "load_wgpu", "request_device"]
