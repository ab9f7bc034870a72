"""Entities, their components, native scripts and the scene that owns them."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

import numpy as np

from .camera import euler_to_quat, quat_to_mat4, translate
from .camera import scale as _scale_matrix
from .scene_camera import SceneCamera

_NULL_ID = 0xFFFFFFFF


def _vector(value, size: int) -> np.ndarray:
    arr = np.array(value, dtype=np.float64)
    if arr.shape != (size,):
        raise ValueError(f"expected a vector of {size} components, got shape {arr.shape}")
    return arr


@dataclass
class TagComponent:
    tag: str = ""


@dataclass(eq=False)
class TransformComponent:
    """Translation, Euler rotation in radians and scale of an entity."""

    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))

    def __post_init__(self) -> None:
        self.translation = _vector(self.translation, 3)
        self.rotation = _vector(self.rotation, 3)
        self.scale = _vector(self.scale, 3)

    def transform(self) -> np.ndarray:
        """Model matrix: translation, then rotation, then scale."""
        rotation = quat_to_mat4(euler_to_quat(_vector(self.rotation, 3)))
        return translate(_vector(self.translation, 3)) @ rotation @ _scale_matrix(_vector(self.scale, 3))


@dataclass(eq=False)
class SpriteRendererComponent:
    color: np.ndarray = field(default_factory=lambda: np.ones(4))

    def __post_init__(self) -> None:
        self.color = _vector(self.color, 4)


@dataclass(eq=False)
class CameraComponent:
    camera: SceneCamera = field(default_factory=SceneCamera)
    primary: bool = True
    fixed_aspect_ratio: bool = False


class ScriptableEntity:
    """Base class for native scripts attached to an entity."""

    def __init__(self) -> None:
        self.entity = Entity()

    def get_component(self, component_type):
        return self.entity.get_component(component_type)

    def on_create(self) -> None:
        pass

    def on_destroy(self) -> None:
        pass

    def on_update(self, ts) -> None:
        pass


@dataclass
class NativeScriptComponent:
    """Holds a script factory and, once the scene has run, the live script."""

    instance: Optional[ScriptableEntity] = None
    instantiate_script: Optional[Callable[[], ScriptableEntity]] = None

    def bind(self, script_class: Callable[[], ScriptableEntity]) -> None:
        self.instantiate_script = script_class

    def destroy(self) -> None:
        self.instance = None


class Entity:
    """Handle to an entity in a scene; a handle of ``None`` is the null entity."""

    def __init__(self, handle: Optional[int] = None, scene: Optional["Scene"] = None) -> None:
        self.handle = handle
        self.scene = scene

    def _components(self) -> dict:
        if self.handle is None or self.scene is None:
            raise ValueError("Entity is null!")
        return self.scene._components_of(self.handle)

    def add_component(self, component):
        components = self._components()
        if type(component) in components:
            raise ValueError("Entity already has component!")
        components[type(component)] = component
        self.scene._on_component_added(self, component)
        return component

    def get_component(self, component_type):
        try:
            return self._components()[component_type]
        except KeyError:
            raise KeyError("Entity does not have component!") from None

    def has_component(self, component_type) -> bool:
        return component_type in self._components()

    def remove_component(self, component_type) -> None:
        components = self._components()
        if component_type not in components:
            raise KeyError("Entity does not have component!")
        del components[component_type]

    def __bool__(self) -> bool:
        return self.handle is not None

    def __int__(self) -> int:
        return _NULL_ID if self.handle is None else self.handle

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return self.handle == other.handle and self.scene is other.scene

    def __hash__(self) -> int:
        return hash((self.handle, id(self.scene)))

    def __repr__(self) -> str:
        return f"Entity(handle={self.handle!r})"


class Scene:
    """Owns entities and their components; updates scripts and draws sprites."""

    def __init__(self) -> None:
        self._registry: dict[int, dict[type, Any]] = {}
        self._ids = itertools.count()
        self.viewport_width = 0
        self.viewport_height = 0

    def _components_of(self, handle: int) -> dict:
        try:
            return self._registry[handle]
        except KeyError:
            raise KeyError("Entity is not part of this scene!") from None

    def _view(self, *types) -> Iterator[tuple[int, list]]:
        for handle, components in list(self._registry.items()):
            if all(t in components for t in types):
                yield handle, [components[t] for t in types]

    def create_entity(self, name: str = "") -> Entity:
        """New entity with a transform and a tag (``"Entity"`` when unnamed)."""
        handle = next(self._ids)
        self._registry[handle] = {}
        entity = Entity(handle, self)
        entity.add_component(TransformComponent())
        entity.add_component(TagComponent(name or "Entity"))
        return entity

    def destroy_entity(self, entity: Entity) -> None:
        if entity.scene is not self or entity.handle not in self._registry:
            raise KeyError("Entity is not part of this scene!")
        del self._registry[entity.handle]

    def entities(self) -> list[Entity]:
        return [Entity(handle, self) for handle in self._registry]

    def on_update_runtime(self, ts, renderer=None) -> None:
        """Run native scripts, then draw sprites through the primary camera."""
        for handle, (nsc,) in self._view(NativeScriptComponent):
            if nsc.instance is None:
                if nsc.instantiate_script is None:
                    raise RuntimeError("NativeScriptComponent has no bound script!")
                nsc.instance = nsc.instantiate_script()
                nsc.instance.entity = Entity(handle, self)
                nsc.instance.on_create()
            nsc.instance.on_update(ts)

        if renderer is None:
            return

        main_camera = None
        camera_transform = None
        for _, (transform, camera) in self._view(TransformComponent, CameraComponent):
            if camera.primary:
                main_camera = camera.camera
                camera_transform = transform.transform()
                break

        if main_camera is None:
            return
        renderer.begin_scene(main_camera, camera_transform)
        self._draw_sprites(renderer)
        renderer.end_scene()

    def on_update_editor(self, ts, camera, renderer) -> None:
        renderer.begin_scene(camera)
        self._draw_sprites(renderer)
        renderer.end_scene()

    def _draw_sprites(self, renderer) -> None:
        for _, (transform, sprite) in self._view(TransformComponent, SpriteRendererComponent):
            renderer.draw_quad_transform(transform.transform(), sprite.color)

    def on_viewport_resize(self, width, height) -> None:
        """Record the viewport and resize every camera without a fixed aspect ratio."""
        self.viewport_width = width
        self.viewport_height = height
        for _, (camera,) in self._view(CameraComponent):
            if not camera.fixed_aspect_ratio:
                camera.camera.set_viewport_size(width, height)

    def primary_camera_entity(self) -> Entity:
        for handle, (camera,) in self._view(CameraComponent):
            if camera.primary:
                return Entity(handle, self)
        return Entity()

    def _on_component_added(self, entity: Entity, component) -> None:
        if isinstance(component, CameraComponent):
            component.camera.set_viewport_size(self.viewport_width, self.viewport_height)