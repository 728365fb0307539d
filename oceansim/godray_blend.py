"""Screen-aligned surface that blends the god ray texture over the scene."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from oceansim.screen_quad import ScreenAlignedQuad

__all__ = ["GodRayBlendSurface"]

Vec3 = tuple[float, float, float]

_DEFAULT_ECCENTRICITY = 0.2
_DEFAULT_INTENSITY = 0.2


def _henyey_greenstein(g: float) -> Vec3:
    return (1.0 - g * g, 1.0 + g * g, 2.0 * g)


class GodRayBlendSurface:
    """Full-screen quad whose per-corner normals carry the view rays."""

    def __init__(
        self,
        corner: Optional[Sequence[float]] = None,
        dims: Optional[Sequence[float]] = None,
        texture_size: Optional[Sequence[float]] = None,
    ) -> None:
        self._eccentricity = _DEFAULT_ECCENTRICITY
        self._hgg = _henyey_greenstein(_DEFAULT_ECCENTRICITY)
        self._intensity = _DEFAULT_INTENSITY
        self._sun_dir: Vec3 = (0.0, 0.0, -1.0)
        self.quad: Optional[ScreenAlignedQuad] = None
        self.normals = np.zeros((4, 3))
        self.uniforms: dict[str, object] = {}
        self.modes: dict[str, bool] = {}
        self.blend: Optional[tuple[str, str]] = None
        self.program: Optional[str] = None
        if corner is not None and dims is not None:
            self.build(corner, dims, texture_size)

    @property
    def eccentricity(self) -> float:
        return self._eccentricity

    @eccentricity.setter
    def eccentricity(self, g: float) -> None:
        self._eccentricity = float(g)
        self._hgg = _henyey_greenstein(self._eccentricity)
        if self.uniforms:
            self.uniforms["osgOcean_HGg"] = self._hgg

    @property
    def hgg(self) -> Vec3:
        """Henyey-Greenstein phase terms (1 - g^2, 1 + g^2, 2g)."""
        return self._hgg

    @property
    def intensity(self) -> float:
        return self._intensity

    @intensity.setter
    def intensity(self, value: float) -> None:
        self._intensity = float(value)
        if self.uniforms:
            self.uniforms["osgOcean_Intensity"] = self._intensity

    @property
    def sun_direction(self) -> Vec3:
        return self._sun_dir

    @sun_direction.setter
    def sun_direction(self, value: Sequence[float]) -> None:
        x, y, z = (float(c) for c in value)
        self._sun_dir = (x, y, z)
        if self.uniforms:
            self.uniforms["osgOcean_SunDir"] = self._sun_dir

    def build(
        self,
        corner: Sequence[float],
        dims: Sequence[float],
        texture_size: Optional[Sequence[float]],
    ) -> None:
        """Create the quad and its blending state."""
        self.quad = ScreenAlignedQuad(corner, dims, texture_size)
        self.normals = np.zeros((4, 3))
        self.program = "godray_blend"
        self.blend = ("SRC_ALPHA", "ONE")
        self.modes = {"blend": True}
        self.uniforms = {
            "osgOcean_GodRayTexture": 0,
            "osgOcean_Eye": (0.0, 0.0, 0.0),
            "osgOcean_ViewerDir": (0.0, 1.0, 0.0),
            "osgOcean_SunDir": (0.0, 0.0, -1.0),
            "osgOcean_HGg": self._hgg,
            "osgOcean_Intensity": self._intensity,
        }

    def update(self, view: Sequence[Sequence[float]], proj: Sequence[Sequence[float]]) -> np.ndarray:
        """Set the corner normals to world-space rays to the far plane corners.

        Matrices are row-vector style, as produced by
        :class:`oceansim.ocean_technique.CameraState`.
        """
        v = np.asarray(view, dtype=float)
        p = np.asarray(proj, dtype=float)
        if v.shape != (4, 4) or p.shape != (4, 4):
            raise ValueError("view and projection must be 4x4 matrices")

        far = p[3, 2] / (1.0 + p[2, 2])
        left = far * (p[2, 0] - 1.0) / p[0, 0]
        right = far * (1.0 + p[2, 0]) / p[0, 0]
        top = far * (1.0 + p[2, 1]) / p[1, 1]
        bottom = far * (p[2, 1] - 1.0) / p[1, 1]

        try:
            inv_view = np.linalg.inv(v)
        except np.linalg.LinAlgError as exc:
            raise ValueError("view matrix is singular") from exc

        corners = np.array(
            [
                (left, top, -far, 1.0),
                (left, bottom, -far, 1.0),
                (right, bottom, -far, 1.0),
                (right, top, -far, 1.0),
            ]
        )
        world = corners @ inv_view
        self.normals = world[:, :3] / world[:, 3:4]
        return self.normals.copy()