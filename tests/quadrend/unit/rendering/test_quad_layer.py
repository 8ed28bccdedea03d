from __future__ import annotations

import struct

import pytest

from quadrend.api.quad import InputMode, Quad, Rgba
from quadrend.rendering.quad_layer import MIN_BUFFER_BYTES, QuadLayer
from quadrend.runtime.errors import InvalidQuadError
from tests.quadrend.conftest import FakeDevice, FakeRenderPass

WHITE = Rgba(1.0, 1.0, 1.0)


def _quads(count: int) -> list[Quad]:
    return [Quad.of(float(i), 0.0, 10.0, 10.0, WHITE) for i in range(count)]


def test_new_layer_is_empty_and_unallocated(fake_device: FakeDevice) -> None:
    layer = QuadLayer(name="base", device=fake_device)
    assert layer.is_empty
    assert len(layer) == 0
    assert layer.byte_cap == 0
    assert layer.buffer is None
    assert fake_device.buffers == []


def test_reserve_allocates_capacity_up_front(fake_device: FakeDevice) -> None:
    layer = QuadLayer(name="base", device=fake_device, reserve=100)
    assert layer.byte_cap >= 100 * 32
    assert len(fake_device.buffers) == 1


def test_prepare_uploads_only_when_changed(fake_device: FakeDevice) -> None:
    layer = QuadLayer(name="game", device=fake_device)
    layer.set_quads(_quads(2))
    assert layer.prepare(fake_device.queue) is True
    assert layer.prepare(fake_device.queue) is False
    assert len(fake_device.queue.writes) == 1
    buffer, offset, data = fake_device.queue.writes[0]
    assert offset == 0
    assert len(data) == 64
    assert struct.unpack("<8f", data[32:]) == (1.0, 1.0, 1.0, 1.0, 1.0, 0.0, 10.0, 10.0)
    assert buffer is layer.buffer


def test_buffer_grows_in_powers_of_two_and_releases_old(fake_device: FakeDevice) -> None:
    layer = QuadLayer(name="game", device=fake_device)
    layer.set_quads(_quads(1))
    layer.prepare(fake_device.queue)
    first = layer.buffer
    assert layer.byte_cap == MIN_BUFFER_BYTES

    layer.set_quads(_quads(20))
    layer.prepare(fake_device.queue)
    assert layer.byte_cap == 1024
    assert layer.buffer is not first
    assert first.destroyed


def test_render_instanced_draws_four_vertices_per_instance(fake_device: FakeDevice) -> None:
    layer = QuadLayer(name="game", device=fake_device)
    for quad in _quads(3):
        layer.push(quad)
    layer.prepare(fake_device.queue)
    render_pass = FakeRenderPass()
    assert layer.render(render_pass) is True
    assert render_pass.calls == [
        ("set_vertex_buffer", 0, layer.buffer),
        ("draw", 4, 3, 0, 0),
    ]


def test_render_precomputed_draws_six_vertices_per_quad(fake_device: FakeDevice) -> None:
    layer = QuadLayer(name="game", device=fake_device, mode=InputMode.PRECOMPUTED_CORNERS)
    layer.set_quads(_quads(2))
    layer.prepare(fake_device.queue)
    render_pass = FakeRenderPass()
    layer.render(render_pass)
    assert render_pass.draws() == [("draw", 12, 1, 0, 0)]
    assert len(fake_device.queue.writes[0][2]) == 2 * 6 * 24


def test_empty_or_unprepared_layer_draws_nothing(fake_device: FakeDevice) -> None:
    layer = QuadLayer(name="game", device=fake_device)
    render_pass = FakeRenderPass()
    assert layer.render(render_pass) is False
    layer.push(Quad.of(0.0, 0.0, 1.0, 1.0, WHITE))
    assert layer.render(render_pass) is False
    layer.prepare(fake_device.queue)
    layer.clear()
    layer.prepare(fake_device.queue)
    assert layer.render(render_pass) is False
    assert render_pass.calls == []


def test_release_destroys_buffer(fake_device: FakeDevice) -> None:
    layer = QuadLayer(name="game", device=fake_device, reserve=1)
    buffer = layer.buffer
    layer.release()
    assert buffer.destroyed
    assert layer.buffer is None
    assert layer.byte_cap == 0


def test_rejected_geometry_keeps_pending_state_and_previous_draw(fake_device: FakeDevice) -> None:
    layer = QuadLayer(name="board", device=fake_device, mode=InputMode.PRECOMPUTED_CORNERS)
    layer.push(Quad.of(0.0, 0.0, 10.0, 10.0, WHITE))
    assert layer.prepare(fake_device.queue) is True

    layer.push(Quad.of(0.5, 0.0, 10.0, 10.0, WHITE))
    with pytest.raises(InvalidQuadError):
        layer.prepare(fake_device.queue)
    assert layer.changed
    with pytest.raises(InvalidQuadError):
        layer.prepare(fake_device.queue)

    render_pass = FakeRenderPass()
    assert layer.render(render_pass) is True
    assert render_pass.draws() == [("draw", 6, 1, 0, 0)]
    assert len(fake_device.queue.writes) == 1


def test_render_without_prepare_draws_only_uploaded_quads(fake_device: FakeDevice) -> None:
    layer = QuadLayer(name="game", device=fake_device)
    layer.push(Quad.of(0.0, 0.0, 10.0, 10.0, WHITE))
    layer.prepare(fake_device.queue)
    for quad in _quads(20):
        layer.push(quad)

    render_pass = FakeRenderPass()
    layer.render(render_pass)
    ((_, vertex_count, instance_count, _, _),) = render_pass.draws()
    assert (vertex_count, instance_count) == (4, 1)
    assert instance_count * 32 <= layer.byte_cap

    layer.prepare(fake_device.queue)
    render_pass = FakeRenderPass()
    layer.render(render_pass)
    assert render_pass.draws() == [("draw", 4, 21, 0, 0)]
    assert 21 * 32 <= layer.byte_cap


def test_small_minimum_buffer_size_is_honoured(fake_device: FakeDevice) -> None:
    layer = QuadLayer(name="hud", device=fake_device, min_buffer_bytes=16)
    layer.push(Quad.of(0.0, 0.0, 10.0, 10.0, WHITE))
    layer.prepare(fake_device.queue)
    assert layer.byte_cap == 32
    assert layer.byte_cap < MIN_BUFFER_BYTES
    assert fake_device.buffers[0].size == 32
