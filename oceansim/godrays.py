"""Underwater god ray shafts and sun glare."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

__all__ = ["GodRays", "refract"]

Vec3 = tuple[float, float, float]
Bound = tuple[float, float, float, float, float, float]

# The vertices are displaced in the vertex shader, so the bounds are set
# generously and shifted with the eye.
SHAFT_BOUND: Bound = (-2000.0, -2000.0, -2000.0, 2000.0, 2000.0, 0.0)
GLARE_BOUND: Bound = (-2000.0, -2000.0, -30.0, 2000.0, 2000.0, 0.0)
GLARE_IMAGE = "sun_glare.png"

_SHAFT_LENGTH = 40.0
_GLARE_HALF_SIZE = 15.0
_WATER_TO_AIR = 0.75  # roughly 1 / 1.333
_UP: Vec3 = (0.0, 0.0, 1.0)


@dataclass
class _Geometry:
    """Vertex data and render state of one drawable."""

    vertices: np.ndarray
    tex_coords: np.ndarray
    initial_bound: Bound
    program: str
    colors: list[tuple[float, float, float, float]] = field(
        default_factory=lambda: [(1.0, 1.0, 1.0, 1.0)]
    )
    normals: list[Vec3] = field(default_factory=list)
    primitives: list[tuple[str, list[int]]] = field(default_factory=list)
    uniforms: dict[str, object] = field(default_factory=dict)
    texture: Optional[str] = None


def _vec3(value: Sequence[float]) -> Vec3:
    x, y, z = (float(c) for c in value)
    return (x, y, z)


def _contains(bound: Bound, point: Vec3) -> bool:
    lo, hi = bound[:3], bound[3:]
    return all(l <= p <= h for l, p, h in zip(lo, point, hi))


def refract(ratio: float, incident: Sequence[float], normal: Sequence[float]) -> np.ndarray:
    """Refract ``incident`` through a surface with ``normal``.

    ``ratio`` is the ratio of refractive indices. Raises ValueError when the
    ray is totally internally reflected.
    """
    i = np.asarray(incident, dtype=float)
    n = np.asarray(normal, dtype=float)
    ni = i * ratio
    ni_dot_n = float(ni @ n)
    i_dot_n2 = float(i @ n) ** 2
    k = 1.0 - ratio * ratio * (1.0 - i_dot_n2)
    if k < 0.0:
        raise ValueError("total internal reflection: no refracted ray")
    return n * (-ni_dot_n - math.sqrt(k)) + ni


def _idx(c: int, r: int, row_len: int) -> int:
    return c + r * row_len


class GodRays:
    """Light shafts seen from below the water surface."""

    def __init__(
        self,
        num_of_rays: int = 10,
        sun_dir: Sequence[float] = (0.0, 0.0, -1.0),
        base_water_height: float = 0.0,
    ) -> None:
        if num_of_rays < 1:
            raise ValueError(f"num_of_rays must be positive, got {num_of_rays}")
        self.num_of_rays = int(num_of_rays)
        self.sun_direction = _vec3(sun_dir)
        self.extinction: Vec3 = (0.1, 0.1, 0.1)
        self.base_water_height = float(base_water_height)
        self.eye: Vec3 = (0.0, 0.0, 0.0)
        self.is_dirty = True
        self.is_state_dirty = True
        self.drawables: list[_Geometry] = []
        self.uniforms: dict[str, object] = {}
        self.modes: dict[str, bool] = {}
        self.blend: Optional[tuple[str, str]] = None
        self.wave_time = 0.0
        self.bounds_dirty = False

    def _build(self) -> None:
        self.drawables = [self.create_ray_shafts(), self.create_glare_quad()]
        self.is_dirty = False

    def _build_state_set(self) -> None:
        self.uniforms = {
            "osgOcean_Origin": (0.0, 0.0, 0.0),
            "osgOcean_Extinction_c": self.extinction,
            "osgOcean_Eye": (0.0, 0.0, 0.0),
            "osgOcean_Spacing": 1.0,
            "osgOcean_SunDir": self.sun_direction,
        }
        self.blend = ("SRC_ALPHA", "ONE")
        self.modes = {"blend": True, "depth_test": False, "lighting": False}
        self.is_state_dirty = False

    def create_ray_shafts(self) -> _Geometry:
        """Grid of shafts: an upper and a lower vertex set side by side."""
        grid = self.num_of_rays
        row_len = grid * 2
        disp = (grid - 1.0) / 2.0
        vertices = np.zeros((grid * grid * 2, 3))
        tex_coords = np.zeros((grid * grid * 2, 2))

        for r in range(grid):
            for c in range(grid):
                pos = (c - disp, r - disp, 0.0)
                upper = _idx(c, r, row_len)
                lower = _idx(c + grid, r, row_len)
                vertices[upper] = pos
                vertices[lower] = pos
                tex_coords[lower] = (_SHAFT_LENGTH, _SHAFT_LENGTH)

        primitives = [
            (
                "TRIANGLE_STRIP",
                [
                    _idx(c, r + 1, row_len),
                    _idx(c + grid, r + 1, row_len),
                    _idx(c + 1, r + 1, row_len),
                    _idx(c + grid + 1, r + 1, row_len),
                    _idx(c + 1, r, row_len),
                    _idx(c + grid + 1, r, row_len),
                ],
            )
            for r in range(0, grid - 1, 2)
            for c in range(0, grid - 1, 2)
        ]
        return _Geometry(
            vertices=vertices,
            tex_coords=tex_coords,
            initial_bound=SHAFT_BOUND,
            program="godrays_shader",
            primitives=primitives,
        )

    def create_glare_quad(self) -> _Geometry:
        """Textured quad drawing the sun's glare at the surface."""
        s = _GLARE_HALF_SIZE
        return _Geometry(
            vertices=np.array([(-s, -s, 0.0), (-s, s, 0.0), (s, s, 0.0), (s, -s, 0.0)]),
            tex_coords=np.array([(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)]),
            initial_bound=GLARE_BOUND,
            program="godray_glare",
            normals=[(0.0, 0.0, -1.0)],
            primitives=[("QUADS", [0, 1, 2, 3])],
            uniforms={"osgOcean_GlareTexture": 0},
            texture=GLARE_IMAGE,
        )

    def update(self, time: float, eye: Sequence[float], fov: float) -> bool:
        """Update shader inputs for ``eye``; returns True if it is underwater.

        ``fov`` is the vertical field of view in degrees.
        """
        if self.is_dirty:
            self._build()
        if self.is_state_dirty:
            self._build_state_set()

        eye_v = _vec3(eye)
        self.eye = eye_v
        if not eye_v[2] < self.base_water_height:
            return False

        tan_half_fov = math.tan(math.radians(fov / 2.0))
        depth = -eye_v[2] * 2.0
        spacing = 0.2 * ((depth * tan_half_fov) / float(self.num_of_rays))

        refracted = refract(_WATER_TO_AIR, self.sun_direction, _UP)
        refracted = refracted / np.linalg.norm(refracted)
        scale = (self.base_water_height - eye_v[2]) / refracted[2]
        sun_pos = np.asarray(eye_v) + refracted * scale

        self.uniforms["osgOcean_Eye"] = eye_v
        self.uniforms["osgOcean_Spacing"] = spacing
        self.uniforms["osgOcean_Origin"] = _vec3(sun_pos)
        self.wave_time = float(time) / 2.0

        if not _contains(self.compute_bound(self.drawables[0].initial_bound), eye_v):
            self.bounds_dirty = True
        return True

    def compute_bound(self, initial_bound: Sequence[float]) -> Bound:
        """Shift a bounding box horizontally to follow the eye."""
        x0, y0, z0, x1, y1, z1 = (float(v) for v in initial_bound)
        ex, ey, _ = self.eye
        return (x0 + ex, y0 + ey, z0, x1 + ex, y1 + ey, z1)