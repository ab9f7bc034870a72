# remcengine

remcengine is the core of a small 2D game engine. It keeps the engine's state and does its maths. It does not own a window or a GPU.

## What is in it

| Module | Contents |
| --- | --- |
| `remcengine.events` | `Event` and its subclasses for window, app, key and mouse events. `EventType` and the `EventCategory` flags. `Key` and `MouseButton` codes. `EventDispatcher`, which calls a handler only when the event has the requested class. `InputState`, a record of held keys, held buttons and the cursor position. |
| `remcengine.instrumentor` | `Instrumentor` writes trace-event JSON that Chrome's tracing viewer can open. `InstrumentationTimer`, the `profile_scope(name)` context manager and the `profile_function` decorator time code. `cleanup_output_string` is also here. |
| `remcengine.buffer` | `ShaderDataType`, `shader_data_type_size`, `BufferElement`, and `BufferLayout`, which works out offsets and stride. It also has CPU-side `VertexBuffer` and `IndexBuffer`. |
| `remcengine.camera` | Matrix helpers: `ortho`, `perspective`, `translate`, `rotate`, `scale`, `euler_to_quat`, `quat_to_mat4`, `quat_rotate`. Camera classes: `Camera`, `OrthographicCamera`, and `EditorCamera`, an orbiting perspective camera that pans, rotates and zooms with Left Alt plus mouse, and zooms with the scroll wheel. |
| `remcengine.camera_controller` | `OrthographicCameraController`. W/A/S/D move the camera. Q/E rotate it when rotation is enabled. Scrolling zooms, and window resizes update the projection. |
| `remcengine.scene_camera` | `SceneCamera` switches between `ProjectionType.ORTHOGRAPHIC` and `ProjectionType.PERSPECTIVE`. |
| `remcengine.renderer` | Resource classes: `Shader` (records uniforms), `ShaderLibrary`, `Texture`, `VertexArray`, `Framebuffer` and its specifications, `GraphicsContext`, `RendererAPI`, `RenderCommand`, `Renderer`. Backend handling: `Backend`, `register_backend`, `set_api`, `current_api`, and the `create_*` factories. |
| `remcengine.renderer2d` | `Renderer2D` batches quads (coloured, textured, rotated or under a transform) into indexed draws of up to 32 texture slots. It reports `Statistics`. |
| `remcengine.scene` | `Scene` and `Entity`. The components are `TagComponent`, `TransformComponent`, `SpriteRendererComponent`, `CameraComponent` and `NativeScriptComponent`. `ScriptableEntity` is the base class for scripts. |
| `remcengine.serializer` | `SceneSerializer` writes a scene to a YAML file and adds the entities from such a file to a scene. |

## Installation

```
pip install .
```

Requires Python 3.10 or later, numpy and PyYAML.

## Example

### Input, cameras, scenes and scene files

```python
from remcengine.camera_controller import OrthographicCameraController
from remcengine.events import InputState, Key, MouseScrolledEvent
from remcengine.scene import CameraComponent, Scene, SpriteRendererComponent
from remcengine.serializer import SceneSerializer

controller = OrthographicCameraController(1280 / 720)
keys = InputState()
keys.press_key(Key.D)
controller.on_update(0.016, keys)                  # move right
controller.on_event(MouseScrolledEvent(0.0, 1.0))  # zoom in

scene = Scene()
square = scene.create_entity("Square")
square.add_component(SpriteRendererComponent((0.2, 0.3, 0.8, 1.0)))
camera = scene.create_entity("Camera")
camera.add_component(CameraComponent())
scene.on_viewport_resize(1280, 720)

SceneSerializer(scene).serialize("example.scene")

loaded = Scene()
SceneSerializer(loaded).deserialize("example.scene")   # True
```

### Batching quads

```python
from remcengine.renderer import API, Backend, register_backend
from remcengine.renderer2d import Renderer2D

register_backend(API.OPENGL, Backend())   # default factories: record state only

renderer2d = Renderer2D(max_quads=1000)
renderer2d.init()
renderer2d.begin_scene(controller.camera)
renderer2d.draw_quad((0.0, 0.0), (1.0, 1.0), (0.8, 0.2, 0.3, 1.0))
renderer2d.draw_rotated_quad((1.0, 0.0), (0.5, 0.5), 45.0, (0.2, 0.8, 0.3, 1.0))
renderer2d.end_scene()
renderer2d.stats()   # Statistics(draw_calls=1, quad_count=2)

scene.on_update_runtime(0.016, renderer2d)   # run scripts, draw sprites via the primary camera
```

### Profiling

```python
from remcengine.instrumentor import Instrumentor, profile_function, profile_scope

Instrumentor.get().begin_session("Startup", "startup.json")
with profile_scope("load level"):
    ...
Instrumentor.get().end_session()
```

## Rendering backends

Resources are made through the `create_*` functions in `remcengine.renderer`. These use the `Backend` registered for the current API, which by default is `API.OPENGL`. No backend is registered at the start. Until one is registered, these raise `RendererError`:

- every `create_*` call;
- `RenderCommand()` and `Renderer()` when built without an explicit `RendererAPI`;
- `Renderer2D.init()`.

`Backend()` with no arguments uses the package's own classes. They keep what they are given: uniform values, bound slots, viewport, clear colour and the list of indexed draws. Nothing is drawn. To put pixels on a screen, pass `Backend` factories that wrap a real graphics library.

## What the package does not do

- It opens no window and runs no application loop.
- It does not read keyboard or mouse devices. You fill an `InputState` and build events yourself.
- It does not compile shader source or read shader and image files. A `Shader` only keeps its name, sources or path. A `Texture` keeps its size, path and the bytes given to `set_data`.
- It has no on-screen editor and no debug UI.

## Running the tests

```
pip install ".[test]"
pytest
```