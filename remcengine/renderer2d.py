"""Batched 2D quad renderer with texture slots and draw statistics."""

from __future__ import annotations

import dataclasses
import math
from array import array
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .buffer import BufferElement, BufferLayout, ShaderDataType
from .camera import Camera, EditorCamera, rotate, scale, translate
from .renderer import (
    RenderCommand,
    RendererError,
    Texture,
    create_index_buffer,
    create_shader,
    create_texture,
    create_vertex_array,
    create_vertex_buffer,
)

_QUAD_POSITIONS = np.array(
    [
        [-0.5, -0.5, 0.0, 1.0],
        [0.5, -0.5, 0.0, 1.0],
        [0.5, 0.5, 0.0, 1.0],
        [-0.5, 0.5, 0.0, 1.0],
    ]
)

_TEX_COORDS = ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0))

_QUAD_LAYOUT = (
    BufferElement(ShaderDataType.FLOAT3, "a_Position"),
    BufferElement(ShaderDataType.FLOAT4, "a_Color"),
    BufferElement(ShaderDataType.FLOAT2, "a_TexCoord"),
    BufferElement(ShaderDataType.FLOAT, "a_TexIndex"),
    BufferElement(ShaderDataType.FLOAT, "a_TilingFactor"),
)

TEXTURE_SHADER_PATH = "assets/shaders/Texture.glsl"


@dataclass(frozen=True)
class QuadVertex:
    """One vertex of a batched quad."""

    position: tuple
    color: tuple
    tex_coord: tuple
    tex_index: float
    tiling_factor: float

    FLOAT_COUNT = 3 + 4 + 2 + 1 + 1
    SIZE = FLOAT_COUNT * 4

    def floats(self) -> tuple:
        return (*self.position, *self.color, *self.tex_coord, self.tex_index, self.tiling_factor)


@dataclass
class Statistics:
    """Draw calls and quads since the last reset."""

    draw_calls: int = 0
    quad_count: int = 0

    def total_vertex_count(self) -> int:
        return self.quad_count * 4

    def total_index_count(self) -> int:
        return self.quad_count * 6


def _vec(value, size: int) -> tuple:
    arr = np.array(value, dtype=np.float64)
    if arr.shape != (size,):
        raise ValueError(f"expected a vector of {size} components, got shape {arr.shape}")
    return tuple(float(v) for v in arr)


def _position3(position) -> tuple:
    values = tuple(float(v) for v in position)
    if len(values) == 2:
        return (*values, 0.0)
    if len(values) == 3:
        return values
    raise ValueError("position must have 2 or 3 components")


def _size_scale(size) -> np.ndarray:
    width, height = _vec(size, 2)
    return scale((width, height, 1.0))


class Renderer2D:
    """Collects quads into batches and draws each batch in one indexed call."""

    MAX_TEXTURE_SLOTS = 32

    def __init__(self, render_command: Optional[RenderCommand] = None, max_quads: int = 20000) -> None:
        if max_quads < 1:
            raise ValueError("max_quads must be at least 1")
        self.render_command = render_command if render_command is not None else RenderCommand()
        self.max_quads = max_quads
        self.max_vertices = max_quads * 4
        self.max_indices = max_quads * 6
        self.vertex_array = None
        self.vertex_buffer = None
        self.texture_shader = None
        self.white_texture = None
        self._initialized = False
        self._vertices: list[QuadVertex] = []
        self._quad_index_count = 0
        self._texture_slots: list[Optional[Texture]] = [None] * self.MAX_TEXTURE_SLOTS
        self._texture_slot_index = 1  # slot 0 holds the white texture
        self._stats = Statistics()

    @property
    def vertices(self) -> tuple:
        return tuple(self._vertices)

    @property
    def quad_index_count(self) -> int:
        return self._quad_index_count

    @property
    def texture_slots(self) -> tuple:
        return tuple(self._texture_slots[: self._texture_slot_index])

    def init(self) -> None:
        self.vertex_array = create_vertex_array()
        self.vertex_buffer = create_vertex_buffer(size=self.max_vertices * QuadVertex.SIZE)
        self.vertex_buffer.layout = BufferLayout(_QUAD_LAYOUT)
        self.vertex_array.add_vertex_buffer(self.vertex_buffer)

        indices = []
        for offset in range(0, self.max_vertices, 4):
            indices.extend((offset, offset + 1, offset + 2, offset + 2, offset + 3, offset))
        self.vertex_array.set_index_buffer(create_index_buffer(indices))

        self.white_texture = create_texture(width=1, height=1)
        self.white_texture.set_data(b"\xff\xff\xff\xff")

        self.texture_shader = create_shader(filepath=TEXTURE_SHADER_PATH)
        self.texture_shader.bind()
        self.texture_shader.set_int_array("u_Textures", range(self.MAX_TEXTURE_SLOTS))

        self._texture_slots = [None] * self.MAX_TEXTURE_SLOTS
        self._texture_slots[0] = self.white_texture
        self._initialized = True
        self._start_batch()

    def shutdown(self) -> None:
        self._vertices = []
        self._quad_index_count = 0
        self._initialized = False

    def _require_init(self) -> None:
        if not self._initialized:
            raise RendererError("Renderer2D is not initialized!")

    def begin_scene(self, camera, transform=None) -> None:
        """Start a scene from a camera and its transform, an editor camera or an orthographic camera."""
        self._require_init()
        if transform is not None:
            if not isinstance(camera, Camera):
                raise TypeError("a camera transform needs a Camera")
            view_projection = camera.projection @ np.linalg.inv(np.asarray(transform, dtype=np.float64))
        elif isinstance(camera, EditorCamera):
            view_projection = camera.view_projection()
        elif hasattr(camera, "view_projection_matrix"):
            view_projection = camera.view_projection_matrix
        else:
            raise TypeError("camera without a transform must be an EditorCamera or OrthographicCamera")

        self.texture_shader.bind()
        self.texture_shader.set_mat4("u_ViewProjection", view_projection)
        self._start_batch()

    def end_scene(self) -> None:
        self.flush()

    def _start_batch(self) -> None:
        self._quad_index_count = 0
        self._vertices = []
        self._texture_slot_index = 1

    def flush(self) -> None:
        if self._quad_index_count == 0:
            return
        data = array("f", (f for vertex in self._vertices for f in vertex.floats()))
        self.vertex_buffer.set_data(data.tobytes())

        for slot, texture in enumerate(self._texture_slots[: self._texture_slot_index]):
            texture.bind(slot)

        self.render_command.draw_indexed(self.vertex_array, self._quad_index_count)
        self._stats.draw_calls += 1

    def _next_batch(self) -> None:
        self.flush()
        self._start_batch()

    def draw_quad(self, position, size, color_or_texture, tiling_factor=1.0, tint_color=None) -> None:
        transform = translate(_position3(position)) @ _size_scale(size)
        self.draw_quad_transform(transform, color_or_texture, tiling_factor, tint_color)

    def draw_rotated_quad(
        self, position, size, rotation, color_or_texture, tiling_factor=1.0, tint_color=None
    ) -> None:
        """Draw a quad turned ``rotation`` degrees about Z."""
        transform = (
            translate(_position3(position))
            @ rotate(math.radians(rotation), (0.0, 0.0, 1.0))
            @ _size_scale(size)
        )
        self.draw_quad_transform(transform, color_or_texture, tiling_factor, tint_color)

    def draw_quad_transform(self, transform, color_or_texture, tiling_factor=1.0, tint_color=None) -> None:
        """Draw a unit quad under ``transform`` with a colour or a tinted texture."""
        self._require_init()
        matrix = np.array(transform, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ValueError(f"expected a 4x4 transform, got shape {matrix.shape}")

        if self._quad_index_count >= self.max_indices:
            self._next_batch()

        if isinstance(color_or_texture, Texture):
            color = (1.0, 1.0, 1.0, 1.0) if tint_color is None else _vec(tint_color, 4)
            texture_index = self._texture_slot_for(color_or_texture)
            tiling = float(tiling_factor)
        else:
            color = _vec(color_or_texture, 4)
            texture_index = 0.0
            tiling = 1.0

        corners = (matrix @ _QUAD_POSITIONS.T).T[:, :3]
        for corner, tex_coord in zip(corners, _TEX_COORDS):
            self._vertices.append(
                QuadVertex(
                    position=tuple(float(v) for v in corner),
                    color=color,
                    tex_coord=tex_coord,
                    tex_index=texture_index,
                    tiling_factor=tiling,
                )
            )
        self._quad_index_count += 6
        self._stats.quad_count += 1

    def _texture_slot_for(self, texture: Texture) -> float:
        for slot in range(1, self._texture_slot_index):
            if self._texture_slots[slot] == texture:
                return float(slot)
        if self._texture_slot_index >= self.MAX_TEXTURE_SLOTS:
            self._next_batch()
        slot = self._texture_slot_index
        self._texture_slots[slot] = texture
        self._texture_slot_index += 1
        return float(slot)

    def reset_stats(self) -> None:
        self._stats = Statistics()

    def stats(self) -> Statistics:
        return dataclasses.replace(self._stats)