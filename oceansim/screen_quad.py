"""A textured quad aligned with the screen."""

from __future__ import annotations

from typing import Optional, Sequence

__all__ = ["ScreenAlignedQuad"]

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]


class ScreenAlignedQuad:
    """Four-vertex quad with texture coordinates spanning a texture's size.

    The quad is built only when a corner, dimensions and a texture size are
    all given; otherwise it stays empty until :meth:`build` is called.
    """

    def __init__(
        self,
        corner: Optional[Sequence[float]] = None,
        dims: Optional[Sequence[float]] = None,
        texture_size: Optional[Sequence[float]] = None,
    ) -> None:
        self.vertices: list[Vec3] = []
        self.tex_coords: list[Vec2] = []
        self.colors: list[tuple[float, float, float, float]] = []
        self.normals: list[Vec3] = []
        self.primitives: list[tuple[str, int, int]] = []
        self.modes: dict[str, bool] = {}
        if corner is not None and dims is not None and texture_size is not None:
            self.build(corner, dims, texture_size)

    def build(
        self,
        corner: Sequence[float],
        dims: Sequence[float],
        texture_size: Optional[Sequence[float]],
    ) -> None:
        """Fill in the quad geometry; a missing texture size leaves it untouched."""
        if texture_size is None:
            return
        cx, cy, cz = (float(c) for c in corner)
        dx, dy = (float(d) for d in dims)
        tw, th = (float(t) for t in texture_size)

        self.vertices = [
            (cx, cy + dy, cz),
            (cx, cy, cz),
            (cx + dx, cy, cz),
            (cx + dx, cy + dy, cz),
        ]
        self.tex_coords = [(0.0, th), (0.0, 0.0), (tw, 0.0), (tw, th)]
        self.colors = [(1.0, 1.0, 1.0, 1.0)]
        self.normals = [(0.0, -1.0, 0.0)]
        self.primitives.append(("QUADS", 0, 4))
        self.modes["lighting"] = False
        self.modes["depth_test"] = False