"""Camera projections, transform helpers, and the orthographic and editor cameras."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from .events import EventDispatcher, InputState, Key, MouseButton, MouseScrolledEvent

_F = np.float64


def _vec(value, size: int) -> np.ndarray:
    arr = np.array(value, dtype=np.float64)
    if arr.shape != (size,):
        raise ValueError(f"expected a vector of {size} components, got shape {arr.shape}")
    return arr


def ortho(left, right, bottom, top, near=-1.0, far=1.0) -> np.ndarray:
    """Right-handed orthographic projection mapping depth to [-1, 1]."""
    l, r, b, t, n, f = (_F(v) for v in (left, right, bottom, top, near, far))
    m = np.eye(4)
    with np.errstate(divide="ignore", invalid="ignore"):
        m[0, 0] = _F(2) / (r - l)
        m[1, 1] = _F(2) / (t - b)
        m[2, 2] = _F(-2) / (f - n)
        m[0, 3] = -(r + l) / (r - l)
        m[1, 3] = -(t + b) / (t - b)
        m[2, 3] = -(f + n) / (f - n)
    return m


def perspective(fovy, aspect, near, far) -> np.ndarray:
    """Right-handed perspective projection; ``fovy`` is in radians."""
    fovy, aspect, n, f = (_F(v) for v in (fovy, aspect, near, far))
    m = np.zeros((4, 4))
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        tan_half = np.tan(fovy / 2)
        m[0, 0] = _F(1) / (aspect * tan_half)
        m[1, 1] = _F(1) / tan_half
        m[2, 2] = -(f + n) / (f - n)
        m[3, 2] = -1.0
        m[2, 3] = -(2 * f * n) / (f - n)
    return m


def translate(offset) -> np.ndarray:
    m = np.eye(4)
    m[:3, 3] = _vec(offset, 3)
    return m


def rotate(angle, axis) -> np.ndarray:
    """Rotation by ``angle`` radians about ``axis``."""
    a = _vec(axis, 3)
    a = a / np.linalg.norm(a)
    c, s = math.cos(angle), math.sin(angle)
    cross = np.array([[0.0, -a[2], a[1]], [a[2], 0.0, -a[0]], [-a[1], a[0], 0.0]])
    m = np.eye(4)
    m[:3, :3] = c * np.eye(3) + (1 - c) * np.outer(a, a) + s * cross
    return m


def scale(factors) -> np.ndarray:
    """Scale matrix; a single number scales all three axes."""
    f = np.broadcast_to(np.asarray(factors, dtype=np.float64), (3,))
    return np.diag([f[0], f[1], f[2], 1.0])


def euler_to_quat(angles) -> np.ndarray:
    """Quaternion (w, x, y, z) from pitch, yaw, roll in radians."""
    e = _vec(angles, 3) * 0.5
    cx, cy, cz = np.cos(e)
    sx, sy, sz = np.sin(e)
    return np.array(
        [
            cx * cy * cz + sx * sy * sz,
            sx * cy * cz - cx * sy * sz,
            cx * sy * cz + sx * cy * sz,
            cx * cy * sz - sx * sy * cz,
        ]
    )


def _quat_to_mat3(quat) -> np.ndarray:
    w, x, y, z = _vec(quat, 4)
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
            [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
            [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
        ]
    )


def quat_to_mat4(quat) -> np.ndarray:
    m = np.eye(4)
    m[:3, :3] = _quat_to_mat3(quat)
    return m


def quat_rotate(quat, vector) -> np.ndarray:
    return _quat_to_mat3(quat) @ _vec(vector, 3)


class Camera:
    """A camera is just a projection matrix."""

    def __init__(self, projection: Optional[np.ndarray] = None) -> None:
        self.projection = np.eye(4) if projection is None else np.array(projection, dtype=np.float64)


class OrthographicCamera:
    """2D camera with a position and a rotation in degrees around Z."""

    def __init__(self, left, right, bottom, top) -> None:
        self._projection_matrix = ortho(left, right, bottom, top, -1.0, 1.0)
        self._view_matrix = np.eye(4)
        self._position = np.zeros(3)
        self._rotation = 0.0
        self._view_projection_matrix = self._projection_matrix @ self._view_matrix

    def set_projection(self, left, right, bottom, top) -> None:
        self._projection_matrix = ortho(left, right, bottom, top, -1.0, 1.0)
        self._view_projection_matrix = self._projection_matrix @ self._view_matrix

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @position.setter
    def position(self, value) -> None:
        self._position = _vec(value, 3)
        self._recalculate_view_matrix()

    @property
    def rotation(self) -> float:
        return self._rotation

    @rotation.setter
    def rotation(self, value: float) -> None:
        self._rotation = float(value)
        self._recalculate_view_matrix()

    @property
    def projection_matrix(self) -> np.ndarray:
        return self._projection_matrix

    @property
    def view_matrix(self) -> np.ndarray:
        return self._view_matrix

    @property
    def view_projection_matrix(self) -> np.ndarray:
        return self._view_projection_matrix

    def _recalculate_view_matrix(self) -> None:
        transform = translate(self._position) @ rotate(math.radians(self._rotation), (0.0, 0.0, 1.0))
        self._view_matrix = np.linalg.inv(transform)
        self._view_projection_matrix = self._projection_matrix @ self._view_matrix


class EditorCamera(Camera):
    """Perspective camera orbiting a focal point, driven by Alt plus mouse."""

    def __init__(self, fov=45.0, aspect_ratio=1.778, near_clip=0.1, far_clip=1000.0) -> None:
        super().__init__(perspective(math.radians(fov), aspect_ratio, near_clip, far_clip))
        self.fov = float(fov)
        self.aspect_ratio = float(aspect_ratio)
        self.near_clip = float(near_clip)
        self.far_clip = float(far_clip)
        self.view_matrix = np.eye(4)
        self.position = np.zeros(3)
        self.focal_point = np.zeros(3)
        self.initial_mouse_position = np.zeros(2)
        self.distance = 10.0
        self.pitch = 0.0
        self.yaw = 0.0
        self.viewport_width = 1280.0
        self.viewport_height = 720.0
        self._update_view()

    def on_update(self, ts, input_state: InputState) -> None:
        if input_state.is_key_pressed(Key.LEFT_ALT):
            mouse = np.array([input_state.mouse_x, input_state.mouse_y], dtype=np.float64)
            delta = (mouse - self.initial_mouse_position) * 0.003
            self.initial_mouse_position = mouse

            if input_state.is_mouse_button_pressed(MouseButton.MIDDLE):
                self._mouse_pan(delta)
            elif input_state.is_mouse_button_pressed(MouseButton.LEFT):
                self._mouse_rotate(delta)
            elif input_state.is_mouse_button_pressed(MouseButton.RIGHT):
                self._mouse_zoom(delta[1])
        self._update_view()

    def on_event(self, event) -> None:
        EventDispatcher(event).dispatch(MouseScrolledEvent, self._on_mouse_scroll)

    def set_viewport_size(self, width, height) -> None:
        self.viewport_width = float(width)
        self.viewport_height = float(height)
        self._update_projection()

    def view_projection(self) -> np.ndarray:
        return self.projection @ self.view_matrix

    def orientation(self) -> np.ndarray:
        return euler_to_quat((-self.pitch, -self.yaw, 0.0))

    def up_direction(self) -> np.ndarray:
        return quat_rotate(self.orientation(), (0.0, 1.0, 0.0))

    def right_direction(self) -> np.ndarray:
        return quat_rotate(self.orientation(), (1.0, 0.0, 0.0))

    def forward_direction(self) -> np.ndarray:
        return quat_rotate(self.orientation(), (0.0, 0.0, -1.0))

    def _update_projection(self) -> None:
        with np.errstate(divide="ignore", invalid="ignore"):
            self.aspect_ratio = float(_F(self.viewport_width) / _F(self.viewport_height))
        self.projection = perspective(math.radians(self.fov), self.aspect_ratio, self.near_clip, self.far_clip)

    def _update_view(self) -> None:
        self.position = self.focal_point - self.forward_direction() * self.distance
        transform = translate(self.position) @ quat_to_mat4(self.orientation())
        self.view_matrix = np.linalg.inv(transform)

    def _on_mouse_scroll(self, event: MouseScrolledEvent) -> bool:
        self._mouse_zoom(event.y_offset * 0.1)
        self._update_view()
        return False

    def _pan_speed(self) -> tuple[float, float]:
        x = min(self.viewport_width / 1000.0, 2.4)
        x_factor = 0.0366 * (x * x) - 0.1778 * x + 0.3021
        y = min(self.viewport_height / 1000.0, 2.4)
        y_factor = 0.0366 * (y * y) - 0.1778 * y + 0.3021
        return x_factor, y_factor

    def _rotation_speed(self) -> float:
        return 0.8

    def _zoom_speed(self) -> float:
        distance = max(self.distance * 0.2, 0.0)
        return min(distance * distance, 100.0)

    def _mouse_pan(self, delta) -> None:
        x_speed, y_speed = self._pan_speed()
        self.focal_point = self.focal_point - self.right_direction() * delta[0] * x_speed * self.distance
        self.focal_point = self.focal_point + self.up_direction() * delta[1] * y_speed * self.distance

    def _mouse_rotate(self, delta) -> None:
        yaw_sign = -1.0 if self.up_direction()[1] < 0 else 1.0
        self.yaw += yaw_sign * delta[0] * self._rotation_speed()
        self.pitch += delta[1] * self._rotation_speed()

    def _mouse_zoom(self, delta) -> None:
        self.distance -= delta * self._zoom_speed()
        if self.distance < 1.0:
            self.focal_point = self.focal_point + self.forward_direction()
            self.distance = 1.0