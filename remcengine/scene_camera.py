"""Scene camera switchable between perspective and orthographic projection."""

from __future__ import annotations

import enum
import math

import numpy as np

from .camera import Camera, ortho, perspective


class ProjectionType(enum.IntEnum):
    PERSPECTIVE = 0
    ORTHOGRAPHIC = 1


class SceneCamera(Camera):
    """Camera whose projection is rebuilt whenever a parameter changes."""

    def __init__(self) -> None:
        super().__init__()
        self._projection_type = ProjectionType.ORTHOGRAPHIC
        self._perspective_fov = math.radians(45.0)
        self._perspective_near = 0.01
        self._perspective_far = 1000.0
        self._orthographic_size = 10.0
        self._orthographic_near = -1.0
        self._orthographic_far = 1.0
        self._aspect_ratio = 0.0
        self._recalculate_projection()

    def set_orthographic(self, size, near_clip, far_clip) -> None:
        """Set orthographic parameters; the projection type is left as it is."""
        self._orthographic_size = float(size)
        self._orthographic_near = float(near_clip)
        self._orthographic_far = float(far_clip)
        self._recalculate_projection()

    def set_perspective(self, vertical_fov, near_clip, far_clip) -> None:
        """Switch to perspective; ``vertical_fov`` is in radians."""
        self._projection_type = ProjectionType.PERSPECTIVE
        self._perspective_fov = float(vertical_fov)
        self._perspective_near = float(near_clip)
        self._perspective_far = float(far_clip)
        self._recalculate_projection()

    def set_viewport_size(self, width, height) -> None:
        with np.errstate(divide="ignore", invalid="ignore"):
            self._aspect_ratio = float(np.float64(width) / np.float64(height))
        self._recalculate_projection()

    @property
    def aspect_ratio(self) -> float:
        return self._aspect_ratio

    @property
    def projection_type(self) -> ProjectionType:
        return self._projection_type

    @projection_type.setter
    def projection_type(self, value) -> None:
        self._projection_type = ProjectionType(value)
        self._recalculate_projection()

    @property
    def perspective_vertical_fov(self) -> float:
        return self._perspective_fov

    @perspective_vertical_fov.setter
    def perspective_vertical_fov(self, value) -> None:
        self._perspective_fov = float(value)
        self._recalculate_projection()

    @property
    def perspective_near_clip(self) -> float:
        return self._perspective_near

    @perspective_near_clip.setter
    def perspective_near_clip(self, value) -> None:
        self._perspective_near = float(value)
        self._recalculate_projection()

    @property
    def perspective_far_clip(self) -> float:
        return self._perspective_far

    @perspective_far_clip.setter
    def perspective_far_clip(self, value) -> None:
        self._perspective_far = float(value)
        self._recalculate_projection()

    @property
    def orthographic_size(self) -> float:
        return self._orthographic_size

    @orthographic_size.setter
    def orthographic_size(self, value) -> None:
        self._orthographic_size = float(value)
        self._recalculate_projection()

    @property
    def orthographic_near_clip(self) -> float:
        return self._orthographic_near

    @orthographic_near_clip.setter
    def orthographic_near_clip(self, value) -> None:
        self._orthographic_near = float(value)
        self._recalculate_projection()

    @property
    def orthographic_far_clip(self) -> float:
        return self._orthographic_far

    @orthographic_far_clip.setter
    def orthographic_far_clip(self, value) -> None:
        self._orthographic_far = float(value)
        self._recalculate_projection()

    def _recalculate_projection(self) -> None:
        if self._projection_type is ProjectionType.PERSPECTIVE:
            self.projection = perspective(
                self._perspective_fov, self._aspect_ratio, self._perspective_near, self._perspective_far
            )
            return
        half_width = self._orthographic_size * self._aspect_ratio * 0.5
        half_height = self._orthographic_size * 0.5
        self.projection = ortho(
            -half_width,
            half_width,
            -half_height,
            half_height,
            self._orthographic_near,
            self._orthographic_far,
        )