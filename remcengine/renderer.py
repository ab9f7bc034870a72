"""Rendering front end: pluggable backends, resources and the scene renderer."""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Callable, Iterable, Optional

import numpy as np

from .buffer import IndexBuffer, VertexBuffer

_renderer_ids = itertools.count(1)


class API(enum.IntEnum):
    NONE = 0
    OPENGL = 1


class RendererError(RuntimeError):
    """Raised when a resource cannot be created or a renderer call is invalid."""


class Shader:
    """Shader program that records its bind state and uniform values."""

    def __init__(
        self,
        name: Optional[str] = None,
        vertex_src: Optional[str] = None,
        fragment_src: Optional[str] = None,
        filepath: Optional[str] = None,
    ) -> None:
        if name is None and filepath is not None:
            name = PurePath(filepath).stem
        self.name = name or ""
        self.vertex_src = vertex_src
        self.fragment_src = fragment_src
        self.filepath = filepath
        self.renderer_id = next(_renderer_ids)
        self.bound = False
        self.uniforms: dict[str, Any] = {}

    def bind(self) -> None:
        self.bound = True

    def unbind(self) -> None:
        self.bound = False

    def set_int(self, name: str, value: int) -> None:
        self.uniforms[name] = int(value)

    def set_int_array(self, name: str, values: Iterable[int]) -> None:
        self.uniforms[name] = tuple(int(v) for v in values)

    def set_float(self, name: str, value: float) -> None:
        self.uniforms[name] = float(value)

    def set_float3(self, name: str, value) -> None:
        self.uniforms[name] = _array(value, (3,))

    def set_float4(self, name: str, value) -> None:
        self.uniforms[name] = _array(value, (4,))

    def set_mat4(self, name: str, value) -> None:
        self.uniforms[name] = _array(value, (4, 4))


def _array(value, shape) -> np.ndarray:
    arr = np.array(value, dtype=np.float64)
    if arr.shape != shape:
        raise ValueError(f"expected shape {shape}, got {arr.shape}")
    return arr


class Texture:
    """2D texture; two textures are equal when they share a renderer id."""

    def __init__(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        path: Optional[str] = None,
    ) -> None:
        self.width = int(width or 0)
        self.height = int(height or 0)
        self.path = path
        self.renderer_id = next(_renderer_ids)
        self.data: bytes = b""
        self.bound_slot: Optional[int] = None

    def set_data(self, data) -> None:
        self.data = memoryview(data).tobytes()

    def bind(self, slot: int = 0) -> None:
        self.bound_slot = slot

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Texture):
            return NotImplemented
        return self.renderer_id == other.renderer_id

    def __hash__(self) -> int:
        return hash(self.renderer_id)


class VertexArray:
    """Groups vertex buffers with one index buffer."""

    def __init__(self) -> None:
        self.renderer_id = next(_renderer_ids)
        self.vertex_buffers: list[VertexBuffer] = []
        self.index_buffer: Optional[IndexBuffer] = None
        self.bound = False

    def bind(self) -> None:
        self.bound = True

    def unbind(self) -> None:
        self.bound = False

    def add_vertex_buffer(self, vertex_buffer: VertexBuffer) -> None:
        self.vertex_buffers.append(vertex_buffer)

    def set_index_buffer(self, index_buffer: IndexBuffer) -> None:
        self.index_buffer = index_buffer


class FramebufferTextureFormat(enum.Enum):
    NONE = 0
    RGBA8 = 1
    RED_INTEGER = 2
    DEPTH24STENCIL8 = 3
    DEPTH = 3


@dataclass
class FramebufferTextureSpecification:
    texture_format: FramebufferTextureFormat = FramebufferTextureFormat.NONE


def _as_texture_spec(item) -> FramebufferTextureSpecification:
    if isinstance(item, FramebufferTextureSpecification):
        return item
    return FramebufferTextureSpecification(FramebufferTextureFormat(item))


@dataclass
class FramebufferSpecification:
    width: int = 0
    height: int = 0
    attachments: list = field(default_factory=list)
    samples: int = 1
    swap_chain_target: bool = False

    def __post_init__(self) -> None:
        self.attachments = [_as_texture_spec(a) for a in self.attachments]


class Framebuffer:
    """Off-screen target holding integer colour attachments and an optional depth one."""

    def __init__(self, spec: FramebufferSpecification) -> None:
        self.specification = spec
        self.bound = False
        self.color_formats = [
            a.texture_format
            for a in spec.attachments
            if a.texture_format is not FramebufferTextureFormat.DEPTH24STENCIL8
        ]
        self.depth_format = next(
            (
                a.texture_format
                for a in spec.attachments
                if a.texture_format is FramebufferTextureFormat.DEPTH24STENCIL8
            ),
            FramebufferTextureFormat.NONE,
        )
        self._invalidate()

    def _invalidate(self) -> None:
        shape = (self.specification.height, self.specification.width)
        self._color = [np.zeros(shape, dtype=np.int64) for _ in self.color_formats]
        self._color_ids = [next(_renderer_ids) for _ in self.color_formats]

    def bind(self) -> None:
        self.bound = True

    def unbind(self) -> None:
        self.bound = False

    def resize(self, width: int, height: int) -> None:
        self.specification.width = int(width)
        self.specification.height = int(height)
        self._invalidate()

    def read_pixel(self, attachment_index: int, x: int, y: int) -> int:
        return int(self._color[attachment_index][y, x])

    def clear_attachment(self, attachment_index: int, value: int) -> None:
        self._color[attachment_index].fill(value)

    def color_attachment_renderer_id(self, index: int = 0) -> int:
        return self._color_ids[index]


class GraphicsContext:
    """Context bound to a native window handle."""

    def __init__(self, window) -> None:
        self.window = window
        self.initialized = False
        self.swap_count = 0

    def init(self) -> None:
        self.initialized = True

    def swap_buffers(self) -> None:
        self.swap_count += 1


class RendererAPI:
    """Low-level draw interface that records the state it is given."""

    def __init__(self) -> None:
        self.initialized = False
        self.viewport = (0, 0, 0, 0)
        self.clear_color = np.zeros(4)
        self.clear_count = 0
        self.draw_calls: list[tuple[VertexArray, int]] = []

    def init(self) -> None:
        self.initialized = True

    def set_viewport(self, x: int, y: int, width: int, height: int) -> None:
        self.viewport = (int(x), int(y), int(width), int(height))

    def set_clear_color(self, color) -> None:
        self.clear_color = _array(color, (4,))

    def clear(self) -> None:
        self.clear_count += 1

    def draw_indexed(self, vertex_array: VertexArray, index_count: int = 0) -> None:
        """Draw ``index_count`` indices, or the whole index buffer when it is 0."""
        if not index_count:
            if vertex_array.index_buffer is None:
                raise RendererError("Vertex array has no index buffer!")
            index_count = vertex_array.index_buffer.count
        self.draw_calls.append((vertex_array, index_count))


@dataclass
class Backend:
    """Factories a graphics API supplies for each kind of resource."""

    vertex_buffer: Callable[..., VertexBuffer] = VertexBuffer
    index_buffer: Callable[..., IndexBuffer] = IndexBuffer
    vertex_array: Callable[..., VertexArray] = VertexArray
    shader: Callable[..., Shader] = Shader
    texture: Callable[..., Texture] = Texture
    framebuffer: Callable[..., Framebuffer] = Framebuffer
    graphics_context: Callable[..., GraphicsContext] = GraphicsContext
    renderer_api: Callable[..., RendererAPI] = RendererAPI


@dataclass
class _State:
    api: API = API.OPENGL
    backends: dict = field(default_factory=dict)


_state = _State()


def register_backend(api, backend: Optional[Backend]) -> None:
    """Install ``backend`` for ``api``; ``None`` removes the registration."""
    api = API(api)
    if api is API.NONE:
        raise ValueError("cannot register a backend for RendererAPI::None")
    if backend is None:
        _state.backends.pop(api, None)
    else:
        _state.backends[api] = backend


def set_api(api) -> None:
    _state.api = API(api)


def current_api() -> API:
    return _state.api


def _backend() -> Backend:
    api = _state.api
    if api is API.NONE:
        raise RendererError("RendererAPI::None is currently not supported!")
    try:
        return _state.backends[api]
    except KeyError:
        raise RendererError(f"No backend registered for RendererAPI {api.name}") from None


def create_vertex_buffer(size=None, vertices=None) -> VertexBuffer:
    return _backend().vertex_buffer(size=size, vertices=vertices)


def create_index_buffer(indices) -> IndexBuffer:
    return _backend().index_buffer(indices)


def create_vertex_array() -> VertexArray:
    return _backend().vertex_array()


def create_shader(filepath=None, name=None, vertex_src=None, fragment_src=None) -> Shader:
    """Create a shader from a file, or from a name with vertex and fragment sources."""
    backend = _backend()
    if filepath is not None:
        return backend.shader(name=name, filepath=filepath)
    if name is None or vertex_src is None or fragment_src is None:
        raise ValueError("a shader needs a filepath, or a name with vertex and fragment sources")
    return backend.shader(name=name, vertex_src=vertex_src, fragment_src=fragment_src)


def create_texture(width=None, height=None, path=None) -> Texture:
    backend = _backend()
    if path is not None:
        return backend.texture(path=path)
    if width is None or height is None:
        raise ValueError("a texture needs a path, or a width and a height")
    return backend.texture(width=width, height=height)


def create_framebuffer(spec: FramebufferSpecification) -> Framebuffer:
    return _backend().framebuffer(spec)


def create_graphics_context(window) -> GraphicsContext:
    return _backend().graphics_context(window)


def create_renderer_api() -> RendererAPI:
    return _backend().renderer_api()


class ShaderLibrary:
    """Shaders stored by name."""

    def __init__(self) -> None:
        self._shaders: dict[str, Shader] = {}

    def add(self, shader: Shader, name: Optional[str] = None) -> None:
        key = shader.name if name is None else name
        if self.exists(key):
            raise ValueError("Shader already exists!")
        self._shaders[key] = shader

    def load(self, filepath: str, name: Optional[str] = None) -> Shader:
        shader = create_shader(filepath=filepath)
        self.add(shader, name)
        return shader

    def get(self, name: str) -> Shader:
        try:
            return self._shaders[name]
        except KeyError:
            raise KeyError("Shader not found!") from None

    def exists(self, name: str) -> bool:
        return name in self._shaders

    def __contains__(self, name: object) -> bool:
        return name in self._shaders

    def __len__(self) -> int:
        return len(self._shaders)


class RenderCommand:
    """Thin forwarding layer over one RendererAPI."""

    def __init__(self, api: Optional[RendererAPI] = None) -> None:
        self.api = api if api is not None else create_renderer_api()

    def init(self) -> None:
        self.api.init()

    def set_viewport(self, x, y, width, height) -> None:
        self.api.set_viewport(x, y, width, height)

    def set_clear_color(self, color) -> None:
        self.api.set_clear_color(color)

    def clear(self) -> None:
        self.api.clear()

    def draw_indexed(self, vertex_array: VertexArray, count: int = 0) -> None:
        self.api.draw_indexed(vertex_array, count)


class Renderer:
    """Submits shader and vertex-array pairs under a camera's view-projection."""

    def __init__(self, render_command: Optional[RenderCommand] = None, renderer2d=None) -> None:
        self.render_command = render_command if render_command is not None else RenderCommand()
        self.renderer2d = renderer2d
        self.view_projection_matrix = np.eye(4)
        self.scene_active = False

    @property
    def api(self) -> API:
        return current_api()

    def init(self) -> None:
        self.render_command.init()
        if self.renderer2d is not None:
            self.renderer2d.init()

    def shutdown(self) -> None:
        if self.renderer2d is not None:
            self.renderer2d.shutdown()

    def on_window_resize(self, width, height) -> None:
        self.render_command.set_viewport(0, 0, width, height)

    def begin_scene(self, camera) -> None:
        self.view_projection_matrix = np.array(camera.view_projection_matrix, dtype=np.float64)
        self.scene_active = True

    def end_scene(self) -> None:
        """Mark the current scene as finished."""
        self.scene_active = False

    def submit(self, shader: Shader, vertex_array: VertexArray, transform=None) -> None:
        shader.bind()
        shader.set_mat4("u_ViewProjection", self.view_projection_matrix)
        shader.set_mat4("u_Transform", np.eye(4) if transform is None else transform)
        vertex_array.bind()
        self.render_command.draw_indexed(vertex_array)