"""Core of a small 2D game engine: events, profiling, cameras, batched rendering, scenes and YAML scene files."""

__version__ = "0.1.0"

__all__ = [
    "buffer",
    "camera",
    "camera_controller",
    "events",
    "instrumentor",
    "renderer",
    "renderer2d",
    "scene",
    "scene_camera",
    "serializer",
]