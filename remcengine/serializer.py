"""Saving scenes to YAML text files and loading them back."""

from __future__ import annotations

import logging

import yaml

from .scene import (
    CameraComponent,
    Entity,
    Scene,
    SpriteRendererComponent,
    TagComponent,
    TransformComponent,
)
from .scene_camera import ProjectionType

_log = logging.getLogger("remcengine")

_ENTITY_ID = 12837192831273


class _FlowList(list):
    pass


class _Dumper(yaml.SafeDumper):
    pass


_Dumper.add_representer(
    _FlowList,
    lambda dumper, data: dumper.represent_sequence("tag:yaml.org,2002:seq", data, flow_style=True),
)


def _encode(vector) -> _FlowList:
    return _FlowList(float(v) for v in vector)


def _decode(node, size: int) -> list[float]:
    if not isinstance(node, list) or len(node) != size:
        raise ValueError(f"expected a sequence of {size} numbers, got {node!r}")
    return [float(v) for v in node]


def _serialize_entity(entity: Entity) -> dict:
    out: dict = {"Entity": _ENTITY_ID}

    if entity.has_component(TagComponent):
        out["TagComponent"] = {"Tag": entity.get_component(TagComponent).tag}

    if entity.has_component(TransformComponent):
        tc = entity.get_component(TransformComponent)
        out["TransformComponent"] = {
            "Translation": _encode(tc.translation),
            "Rotation": _encode(tc.rotation),
            "Scale": _encode(tc.scale),
        }

    if entity.has_component(CameraComponent):
        cc = entity.get_component(CameraComponent)
        camera = cc.camera
        out["CameraComponent"] = {
            "Camera": {
                "ProjectionType": int(camera.projection_type),
                "PerspectiveFOV": float(camera.perspective_vertical_fov),
                "PerspectiveNear": float(camera.perspective_near_clip),
                "PerspectiveFar": float(camera.perspective_far_clip),
                "OrthographicSize": float(camera.orthographic_size),
                "OrthographicNear": float(camera.orthographic_near_clip),
                "OrthographicFar": float(camera.orthographic_far_clip),
            },
            "Primary": bool(cc.primary),
            "FixedAspectRatio": bool(cc.fixed_aspect_ratio),
        }

    if entity.has_component(SpriteRendererComponent):
        sprite = entity.get_component(SpriteRendererComponent)
        out["SpriteRendererComponent"] = {"Color": _encode(sprite.color)}

    return out


class SceneSerializer:
    """Writes a scene's entities to YAML and adds entities read from YAML."""

    def __init__(self, scene: Scene) -> None:
        self.scene = scene

    def serialize(self, filepath) -> None:
        document = {
            "Scene": "Untitled",
            "Entities": [_serialize_entity(e) for e in self.scene.entities() if e],
        }
        with open(filepath, "w", encoding="utf-8") as fout:
            yaml.dump(document, fout, Dumper=_Dumper, sort_keys=False, default_flow_style=False)

    def deserialize(self, filepath) -> bool:
        """Add the file's entities to the scene; False when it holds no scene."""
        with open(filepath, encoding="utf-8") as fin:
            data = yaml.safe_load(fin)
        if not isinstance(data, dict) or "Scene" not in data:
            return False

        _log.debug("Deserializing scene '%s'", data["Scene"])

        for node in data.get("Entities") or ():
            uuid = int(node["Entity"])
            tag = node.get("TagComponent")
            name = str(tag["Tag"]) if tag else ""
            _log.debug("Deserialized entity with ID = %d, name = %s", uuid, name)

            entity = self.scene.create_entity(name)

            transform = node.get("TransformComponent")
            if transform:
                tc = entity.get_component(TransformComponent)
                tc.translation = _decode(transform["Translation"], 3)
                tc.rotation = _decode(transform["Rotation"], 3)
                tc.scale = _decode(transform["Scale"], 3)
                tc.__post_init__()

            camera_node = node.get("CameraComponent")
            if camera_node:
                cc = entity.add_component(CameraComponent())
                props = camera_node["Camera"]
                camera = cc.camera
                camera.projection_type = ProjectionType(int(props["ProjectionType"]))
                camera.perspective_vertical_fov = float(props["PerspectiveFOV"])
                camera.perspective_near_clip = float(props["PerspectiveNear"])
                camera.perspective_far_clip = float(props["PerspectiveFar"])
                camera.orthographic_size = float(props["OrthographicSize"])
                camera.orthographic_near_clip = float(props["OrthographicNear"])
                camera.orthographic_far_clip = float(props["OrthographicFar"])
                cc.primary = bool(camera_node["Primary"])
                cc.fixed_aspect_ratio = bool(camera_node["FixedAspectRatio"])

            sprite_node = node.get("SpriteRendererComponent")
            if sprite_node:
                entity.add_component(SpriteRendererComponent(_decode(sprite_node["Color"], 4)))

        return True