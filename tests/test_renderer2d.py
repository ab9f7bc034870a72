from array import array

import numpy as np
import pytest

from remcengine.camera import Camera, EditorCamera, OrthographicCamera, ortho, translate
from remcengine.renderer import (
    API,
    Backend,
    RenderCommand,
    RendererAPI,
    RendererError,
    create_texture,
    register_backend,
    set_api,
)
from remcengine.renderer2d import QuadVertex, Renderer2D, Statistics


@pytest.fixture
def backend():
    register_backend(API.OPENGL, Backend())
    set_api(API.OPENGL)
    yield
    register_backend(API.OPENGL, None)


@pytest.fixture
def setup(backend):
    api = RendererAPI()
    renderer = Renderer2D(RenderCommand(api), max_quads=8)
    renderer.init()
    return renderer, api


def _camera():
    return OrthographicCamera(-1.0, 1.0, -1.0, 1.0)


def test_statistics_totals():
    stats = Statistics(draw_calls=1, quad_count=3)
    assert stats.total_vertex_count() == 12
    assert stats.total_index_count() == 18


def test_init_builds_quad_indices(setup):
    renderer, _ = setup
    indices = renderer.vertex_array.index_buffer.indices
    assert indices[:12] == (0, 1, 2, 2, 3, 0, 4, 5, 6, 6, 7, 4)
    assert renderer.vertex_array.index_buffer.count == renderer.max_indices


def test_init_sets_up_shader_and_white_texture(setup):
    renderer, _ = setup
    assert renderer.texture_shader.uniforms["u_Textures"] == tuple(range(Renderer2D.MAX_TEXTURE_SLOTS))
    assert renderer.white_texture.data == b"\xff\xff\xff\xff"
    assert renderer.texture_slots == (renderer.white_texture,)
    assert renderer.vertex_buffer.size == renderer.max_vertices * QuadVertex.SIZE
    assert [e.name for e in renderer.vertex_buffer.layout] == [
        "a_Position",
        "a_Color",
        "a_TexCoord",
        "a_TexIndex",
        "a_TilingFactor",
    ]


def test_draw_before_init_raises(backend):
    renderer = Renderer2D(RenderCommand(RendererAPI()), max_quads=2)
    with pytest.raises(RendererError):
        renderer.draw_quad((0.0, 0.0), (1.0, 1.0), (1.0, 1.0, 1.0, 1.0))


def test_invalid_max_quads():
    with pytest.raises(ValueError):
        Renderer2D(RenderCommand(RendererAPI()), max_quads=0)


def test_colored_quad_vertices_and_flush(setup):
    renderer, api = setup
    renderer.begin_scene(_camera())
    color = (0.8, 0.2, 0.3, 1.0)
    renderer.draw_quad((0.0, 0.0), (1.0, 1.0), color)

    positions = [v.position for v in renderer.vertices]
    assert positions == [(-0.5, -0.5, 0.0), (0.5, -0.5, 0.0), (0.5, 0.5, 0.0), (-0.5, 0.5, 0.0)]
    assert all(v.color == color and v.tex_index == 0.0 and v.tiling_factor == 1.0 for v in renderer.vertices)
    assert [v.tex_coord for v in renderer.vertices] == [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]

    renderer.end_scene()
    assert api.draw_calls[-1] == (renderer.vertex_array, 6)
    assert renderer.stats().draw_calls == 1
    assert renderer.vertex_buffer.data[:12] == array("f", [-0.5, -0.5, 0.0]).tobytes()


def test_flush_without_quads_draws_nothing(setup):
    renderer, api = setup
    renderer.begin_scene(_camera())
    renderer.end_scene()
    assert api.draw_calls == []
    assert renderer.stats().draw_calls == 0


def test_same_texture_shares_slot(setup):
    renderer, _ = setup
    renderer.begin_scene(_camera())
    first = create_texture(width=2, height=2)
    second = create_texture(width=2, height=2)
    renderer.draw_quad((0.0, 0.0, -0.1), (1.0, 1.0), first, 10.0)
    renderer.draw_quad((1.0, 0.0), (1.0, 1.0), first)
    renderer.draw_quad((2.0, 0.0), (1.0, 1.0), second)
    indices = [v.tex_index for v in renderer.vertices[::4]]
    assert indices == [1.0, 1.0, 2.0]
    assert renderer.vertices[0].tiling_factor == 10.0
    assert renderer.vertices[0].color == (1.0, 1.0, 1.0, 1.0)
    assert renderer.texture_slots == (renderer.white_texture, first, second)
    renderer.end_scene()
    assert first.bound_slot == 1 and second.bound_slot == 2


def test_texture_slot_overflow_starts_new_batch(backend):
    api = RendererAPI()
    renderer = Renderer2D(RenderCommand(api), max_quads=64)
    renderer.init()
    renderer.begin_scene(_camera())
    for _ in range(Renderer2D.MAX_TEXTURE_SLOTS - 1):
        renderer.draw_quad((0.0, 0.0), (1.0, 1.0), create_texture(width=1, height=1))
    assert renderer.stats().draw_calls == 0
    extra = create_texture(width=1, height=1)
    renderer.draw_quad((0.0, 0.0), (1.0, 1.0), extra)
    assert renderer.stats().draw_calls == 1
    assert len(renderer.vertices) == 4
    assert renderer.vertices[0].tex_index == 1.0
    assert renderer.texture_slots == (renderer.white_texture, extra)


def test_quad_limit_splits_batches(backend):
    api = RendererAPI()
    renderer = Renderer2D(RenderCommand(api), max_quads=2)
    renderer.init()
    renderer.begin_scene(_camera())
    for x in range(3):
        renderer.draw_quad((float(x), 0.0), (1.0, 1.0), (1.0, 0.0, 0.0, 1.0))
    assert renderer.stats().draw_calls == 1
    renderer.end_scene()
    stats = renderer.stats()
    assert stats.draw_calls == 2
    assert stats.quad_count == 3
    assert [count for _, count in api.draw_calls] == [renderer.max_indices, 6]


def test_rotated_quad_keeps_corner_set(setup):
    renderer, _ = setup
    renderer.begin_scene(_camera())
    renderer.draw_quad((0.0, 0.0), (1.0, 1.0), (1.0, 1.0, 1.0, 1.0))
    renderer.draw_rotated_quad((0.0, 0.0), (1.0, 1.0), 90.0, (1.0, 1.0, 1.0, 1.0))
    plain = np.array([v.position for v in renderer.vertices[:4]])
    turned = np.array([v.position for v in renderer.vertices[4:]])
    assert not np.allclose(plain, turned)
    assert np.allclose(np.sort(plain, axis=0), np.sort(turned, axis=0))
    assert np.allclose(turned[0], plain[1])


def test_begin_scene_with_camera_transform(setup):
    renderer, _ = setup
    camera = Camera(ortho(-2.0, 2.0, -1.0, 1.0))
    transform = translate((1.0, 2.0, 0.0))
    renderer.begin_scene(camera, transform)
    view_projection = renderer.texture_shader.uniforms["u_ViewProjection"]
    assert np.allclose(view_projection @ transform, camera.projection)


def test_begin_scene_with_editor_and_orthographic_cameras(setup):
    renderer, _ = setup
    editor = EditorCamera()
    renderer.begin_scene(editor)
    assert np.allclose(renderer.texture_shader.uniforms["u_ViewProjection"], editor.view_projection())
    ortho_camera = _camera()
    ortho_camera.position = (0.5, 0.0, 0.0)
    renderer.begin_scene(ortho_camera)
    assert np.allclose(
        renderer.texture_shader.uniforms["u_ViewProjection"], ortho_camera.view_projection_matrix
    )


def test_stats_copy_and_reset(setup):
    renderer, _ = setup
    renderer.begin_scene(_camera())
    renderer.draw_quad((0.0, 0.0), (1.0, 1.0), (1.0, 1.0, 1.0, 1.0))
    snapshot = renderer.stats()
    renderer.draw_quad((0.0, 0.0), (1.0, 1.0), (1.0, 1.0, 1.0, 1.0))
    assert snapshot.quad_count == 1
    assert renderer.stats().quad_count == 2
    renderer.reset_stats()
    assert renderer.stats() == Statistics()


def test_bad_color_and_position_rejected(setup):
    renderer, _ = setup
    renderer.begin_scene(_camera())
    with pytest.raises(ValueError):
        renderer.draw_quad((0.0, 0.0), (1.0, 1.0), (1.0, 1.0, 1.0))
    with pytest.raises(ValueError):
        renderer.draw_quad((0.0,), (1.0, 1.0), (1.0, 1.0, 1.0, 1.0))


def test_shutdown_requires_reinit(setup):
    renderer, _ = setup
    renderer.shutdown()
    with pytest.raises(RendererError):
        renderer.begin_scene(_camera())