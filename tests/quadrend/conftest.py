from __future__ import annotations

import sys
from types import ModuleType, SimpleNamespace

import pytest


class FakeBuffer:
    def __init__(self, *, label: str = "", size: int = 0, usage: int = 0) -> None:
        self.label = label
        self.size = size
        self.usage = usage
        self.destroyed = False

    def destroy(self) -> None:
        self.destroyed = True


class FakeQueue:
    def __init__(self) -> None:
        self.writes: list[tuple[FakeBuffer, int, bytes]] = []

    def write_buffer(self, buffer: FakeBuffer, offset: int, data: bytes) -> None:
        self.writes.append((buffer, offset, bytes(data)))


class FakeRenderPass:
    def __init__(self) -> None:
        self.calls: list[tuple[object, ...]] = []

    def set_pipeline(self, pipeline: object) -> None:
        self.calls.append(("set_pipeline", pipeline))

    def set_bind_group(self, index: int, bind_group: object) -> None:
        self.calls.append(("set_bind_group", index, bind_group))

    def set_vertex_buffer(self, slot: int, buffer: object) -> None:
        self.calls.append(("set_vertex_buffer", slot, buffer))

    def draw(self, vertex_count: int, instance_count: int, first_vertex: int, first_instance: int) -> None:
        self.calls.append(("draw", vertex_count, instance_count, first_vertex, first_instance))

    def draws(self) -> list[tuple[object, ...]]:
        return [call for call in self.calls if call[0] == "draw"]


class FakeDevice:
    def __init__(self) -> None:
        self.queue = FakeQueue()
        self.buffers: list[FakeBuffer] = []
        self.shader_modules: list[str] = []
        self.pipelines: list[dict[str, object]] = []
        self.bind_group_layouts: list[dict[str, object]] = []
        self.bind_groups: list[dict[str, object]] = []

    def create_buffer(self, *, label: str = "", size: int, usage: int, mapped_at_creation: bool = False) -> FakeBuffer:
        _ = mapped_at_creation
        buffer = FakeBuffer(label=label, size=size, usage=usage)
        self.buffers.append(buffer)
        return buffer

    def create_shader_module(self, *, label: str = "", code: str) -> dict[str, object]:
        self.shader_modules.append(code)
        return {"label": label, "code": code}

    def create_bind_group_layout(self, **descriptor) -> dict[str, object]:
        self.bind_group_layouts.append(descriptor)
        return descriptor

    def create_bind_group(self, **descriptor) -> dict[str, object]:
        self.bind_groups.append(descriptor)
        return descriptor

    def create_pipeline_layout(self, **descriptor) -> dict[str, object]:
        return descriptor

    def create_render_pipeline(self, **descriptor) -> dict[str, object]:
        self.pipelines.append(descriptor)
        return descriptor


@pytest.fixture
def fake_device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def fake_wgpu(monkeypatch: pytest.MonkeyPatch) -> ModuleType:
    module = ModuleType("wgpu")
    module.BufferUsage = SimpleNamespace(COPY_DST=0x08, VERTEX=0x20, UNIFORM=0x40)
    module.ShaderStage = SimpleNamespace(VERTEX=0x1, FRAGMENT=0x2)
    monkeypatch.setitem(sys.modules, "wgpu", module)
    return module
