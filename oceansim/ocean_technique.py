"""Base class for ocean surface techniques and camera visibility tests."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import MutableSequence, Sequence

import numpy as np

__all__ = ["CameraState", "OceanTechnique", "add_resource_paths"]

SHADER_PATH = "resources/shaders/"
TEXTURE_PATH = "resources/textures/"


@dataclass(eq=False)
class CameraState:
    """Projection matrix and look direction of the camera being culled.

    The matrix is stored row-vector style, so a perspective projection has
    ``projection[3][3] == 0`` and ``projection[2][3] == -1``.
    """

    projection: np.ndarray
    look_vector: Sequence[float] = (0.0, 0.0, -1.0)

    def __post_init__(self) -> None:
        self.projection = np.asarray(self.projection, dtype=float)
        if self.projection.shape != (4, 4):
            raise ValueError("projection must be a 4x4 matrix")
        self.look_vector = tuple(float(c) for c in self.look_vector)
        if len(self.look_vector) != 3:
            raise ValueError("look_vector must have three components")

    @classmethod
    def perspective(
        cls,
        fovy: float,
        aspect: float,
        z_near: float,
        z_far: float,
        look_vector: Sequence[float] = (0.0, 0.0, -1.0),
    ) -> "CameraState":
        """Camera with a symmetric perspective frustum; ``fovy`` in degrees."""
        tan_half = math.tan(math.radians(fovy * 0.5))
        right = tan_half * aspect * z_near
        left = -right
        top = tan_half * z_near
        bottom = -top
        m = np.zeros((4, 4))
        m[0, 0] = 2.0 * z_near / (right - left)
        m[1, 1] = 2.0 * z_near / (top - bottom)
        m[2, 0] = (right + left) / (right - left)
        m[2, 1] = (top + bottom) / (top - bottom)
        m[2, 2] = -(z_far + z_near) / (z_far - z_near)
        m[2, 3] = -1.0
        m[3, 2] = -2.0 * z_far * z_near / (z_far - z_near)
        return cls(m, look_vector)

    @classmethod
    def orthographic(
        cls,
        left: float,
        right: float,
        bottom: float,
        top: float,
        z_near: float,
        z_far: float,
        look_vector: Sequence[float] = (0.0, 0.0, -1.0),
    ) -> "CameraState":
        """Camera with an orthographic projection."""
        m = np.zeros((4, 4))
        m[0, 0] = 2.0 / (right - left)
        m[1, 1] = 2.0 / (top - bottom)
        m[2, 2] = -2.0 / (z_far - z_near)
        m[3, 0] = -(right + left) / (right - left)
        m[3, 1] = -(top + bottom) / (top - bottom)
        m[3, 2] = -(z_far + z_near) / (z_far - z_near)
        m[3, 3] = 1.0
        return cls(m, look_vector)

    @property
    def is_perspective(self) -> bool:
        return bool(self.projection[3, 3] == 0.0)

    @property
    def fovy(self) -> float:
        """Vertical field of view in degrees of a perspective projection."""
        m = self.projection
        top = (1.0 + m[2, 1]) / m[1, 1]
        bottom = (m[2, 1] - 1.0) / m[1, 1]
        return math.degrees(math.atan(top) - math.atan(bottom))


@dataclass
class OceanTechnique:
    """Common state and defaults shared by ocean surface techniques."""

    node_mask: int = 0xFFFFFFFF
    is_dirty: bool = field(default=True)
    is_animating: bool = True

    def dirty(self) -> None:
        """Request a rebuild on the next update."""
        self.is_dirty = True

    def build(self) -> None:
        """Build the surface; the base technique has nothing to create."""
        self.is_dirty = False

    def get_surface_height(self) -> float:
        return 0.0

    def get_maximum_height(self) -> float:
        return 0.0

    def is_visible(self, camera: CameraState, eye_above_water: bool) -> bool:
        """Conservative check whether the ocean surface can be seen."""
        if self.node_mask == 0:
            return False
        if not camera.is_perspective:
            return True
        cutoff = camera.fovy / 2.0
        dot = camera.look_vector[2]
        return (eye_above_water and dot < cutoff) or (
            not eye_above_water and dot > -cutoff
        )


def add_resource_paths(path_list: MutableSequence[str]) -> None:
    """Append the texture and shader resource paths unless already present."""
    if TEXTURE_PATH not in path_list:
        path_list.append(TEXTURE_PATH)
    if SHADER_PATH not in path_list:
        path_list.append(SHADER_PATH)