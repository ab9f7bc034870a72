"""Keyboard and mouse controller for an orthographic camera."""

from __future__ import annotations

import math

import numpy as np

from .camera import OrthographicCamera
from .events import EventDispatcher, InputState, Key, MouseScrolledEvent, WindowResizeEvent


class OrthographicCameraController:
    """Moves with WASD, rotates with Q/E when enabled, zooms with the scroll wheel."""

    def __init__(self, aspect_ratio, rotation=False) -> None:
        self.aspect_ratio = float(aspect_ratio)
        self.zoom_level = 1.0
        self.camera = OrthographicCamera(
            -self.aspect_ratio * self.zoom_level,
            self.aspect_ratio * self.zoom_level,
            -self.zoom_level,
            self.zoom_level,
        )
        self.rotation = rotation
        self.camera_position = np.zeros(3)
        self.camera_rotation = 0.0  # degrees, anti-clockwise
        self.camera_translation_speed = 5.0
        self.camera_rotation_speed = 180.0

    def on_update(self, ts, input_state: InputState) -> None:
        ts = float(ts)
        angle = math.radians(self.camera_rotation)
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        step = self.camera_translation_speed * ts

        if input_state.is_key_pressed(Key.A):
            self.camera_position[0] -= cos_a * step
            self.camera_position[1] -= sin_a * step
        elif input_state.is_key_pressed(Key.D):
            self.camera_position[0] += cos_a * step
            self.camera_position[1] += sin_a * step

        if input_state.is_key_pressed(Key.W):
            self.camera_position[0] += -sin_a * step
            self.camera_position[1] += cos_a * step
        elif input_state.is_key_pressed(Key.S):
            self.camera_position[0] -= -sin_a * step
            self.camera_position[1] -= cos_a * step

        if self.rotation:
            if input_state.is_key_pressed(Key.Q):
                self.camera_rotation += self.camera_rotation_speed * ts
            if input_state.is_key_pressed(Key.E):
                self.camera_rotation -= self.camera_rotation_speed * ts

            if self.camera_rotation > 180.0:
                self.camera_rotation -= 360.0
            elif self.camera_rotation <= -180.0:
                self.camera_rotation += 360.0

            self.camera.rotation = self.camera_rotation

        self.camera.position = self.camera_position
        self.camera_translation_speed = self.zoom_level

    def on_event(self, event) -> None:
        dispatcher = EventDispatcher(event)
        dispatcher.dispatch(MouseScrolledEvent, self._on_mouse_scrolled)
        dispatcher.dispatch(WindowResizeEvent, self._on_window_resized)

    def on_resize(self, width, height) -> None:
        self.aspect_ratio = width / height
        self._update_projection()

    def _update_projection(self) -> None:
        self.camera.set_projection(
            -self.aspect_ratio * self.zoom_level,
            self.aspect_ratio * self.zoom_level,
            -self.zoom_level,
            self.zoom_level,
        )

    def _on_mouse_scrolled(self, event: MouseScrolledEvent) -> bool:
        self.zoom_level -= event.y_offset * 0.25
        self.zoom_level = max(self.zoom_level, 0.25)
        self._update_projection()
        return False

    def _on_window_resized(self, event: WindowResizeEvent) -> bool:
        self.on_resize(float(event.width), float(event.height))
        return False