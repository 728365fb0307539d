"""A single square tile of ocean surface geometry."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

__all__ = ["OceanTile"]

_UP = (0.0, 0.0, 1.0)


class OceanTile:
    """Vertices and smoothed normals of one tile of the ocean height field.

    The tile holds ``(resolution + 1)`` squared vertices: the extra row and
    column repeat the first ones so that neighbouring tiles join seamlessly.
    Vertex ``(x, y)`` lives at flat index ``y * row_length + x``.
    """

    def __init__(
        self,
        heights: Sequence[float],
        resolution: int,
        spacing: float,
        displacements: Optional[Sequence[Sequence[float]]] = None,
        use_vbo: bool = False,
    ) -> None:
        res = int(resolution)
        if res < 1:
            raise ValueError(f"resolution must be positive, got {resolution}")
        h = np.asarray(heights, dtype=float).ravel()
        if h.size < res * res:
            raise ValueError(
                f"need {res * res} heights for resolution {res}, got {h.size}"
            )
        self._setup(res, spacing, use_vbo)

        row = self._row_length
        wrap = np.arange(row) % res
        idx = wrap[:, None] * res + wrap[None, :]

        verts = np.zeros((row, row, 3))
        if self._use_vbo:
            steps = np.arange(row) * self._spacing
            verts[..., 0] = steps[None, :]
            verts[..., 1] = -steps[:, None]
        if displacements is not None:
            d = np.asarray(displacements, dtype=float).reshape(-1, 2)
            if d.shape[0] < res * res:
                raise ValueError(
                    f"need {res * res} displacements for resolution {res}, "
                    f"got {d.shape[0]}"
                )
            verts[..., 0] += d[idx, 0]
            verts[..., 1] += d[idx, 1]
        verts[..., 2] = h[idx]

        self._vertices = verts
        self._update_height_stats()
        self.compute_normals()

    def _setup(self, resolution: int, spacing: float, use_vbo: bool) -> None:
        self._resolution = int(resolution)
        self._row_length = self._resolution + 1
        self._spacing = float(spacing)
        self._use_vbo = bool(use_vbo)
        self._max_delta = 0.0
        self._vertices = np.zeros((self._row_length, self._row_length, 3))
        self._normals = np.zeros((self._row_length, self._row_length, 3))
        self._average_height = 0.0
        self._max_height = 0.0

    def _update_height_stats(self) -> None:
        z = self._vertices[..., 2]
        self._average_height = float(z.mean())
        self._max_height = float(z.max())

    @classmethod
    def from_parent(cls, tile: "OceanTile", resolution: int, spacing: float) -> "OceanTile":
        """Build a coarser tile by averaging groups of four parent vertices."""
        res = int(resolution)
        if res < 1:
            raise ValueError(f"resolution must be positive, got {resolution}")
        parent_res = tile.resolution
        if parent_res % res != 0:
            raise ValueError(
                f"parent resolution {parent_res} is not a multiple of {res}"
            )
        inc = parent_res // res
        inc2 = inc // 2

        child = cls.__new__(cls)
        child._setup(res, spacing, tile.use_vbo)
        row = child._row_length

        pv = tile._vertices
        steps = np.arange(0, parent_res, inc)
        shifted = steps + inc2
        block = (
            pv[np.ix_(steps, steps)]
            + pv[np.ix_(steps, shifted)]
            + pv[np.ix_(shifted, steps)]
            + pv[np.ix_(shifted, shifted)]
        ) * 0.25

        verts = np.zeros((row, row, 3))
        verts[:res, :res] = block
        verts[row - 1, : row - 1] = verts[0, : row - 1]
        verts[: row - 1, row - 1] = verts[: row - 1, 0]
        verts[row - 1, row - 1] = verts[0, 0]

        child._vertices = verts
        child._update_height_stats()
        child.compute_normals()
        return child

    @property
    def resolution(self) -> int:
        return self._resolution

    @property
    def row_length(self) -> int:
        return self._row_length

    @property
    def num_vertices(self) -> int:
        return self._row_length * self._row_length

    @property
    def spacing(self) -> float:
        return self._spacing

    @property
    def use_vbo(self) -> bool:
        return self._use_vbo

    @property
    def max_delta(self) -> float:
        return self._max_delta

    @property
    def average_height(self) -> float:
        return self._average_height

    @property
    def maximum_height(self) -> float:
        return self._max_height

    @property
    def vertices(self) -> np.ndarray:
        """All vertices as an array of shape (num_vertices, 3)."""
        return self._vertices.reshape(-1, 3).copy()

    @property
    def normals(self) -> np.ndarray:
        """All normals as an array of shape (num_vertices, 3)."""
        return self._normals.reshape(-1, 3).copy()

    def _check_index(self, x: int, y: int) -> None:
        if x < 0 or y < 0:
            raise IndexError(f"vertex index ({x}, {y}) is negative")

    def get_vertex(self, x: int, y: int) -> np.ndarray:
        """Vertex at column ``x`` and row ``y``."""
        self._check_index(x, y)
        return self._vertices[y, x].copy()

    def get_normal(self, x: int, y: int) -> np.ndarray:
        """Normal at column ``x`` and row ``y``."""
        self._check_index(x, y)
        return self._normals[y, x].copy()

    def compute_normals(self) -> None:
        """Recompute smoothed per-vertex normals, wrapping at the tile edges."""
        row = self._row_length
        s = self._spacing
        verts = self._vertices

        coords = np.arange(-1, row)
        first = (coords + row) % row
        second = (coords + 1) % row

        a = verts[np.ix_(first, first)].copy()
        b = verts[np.ix_(second, first)].copy()
        c = verts[np.ix_(first, second)].copy()
        d = verts[np.ix_(second, second)].copy()

        if self._use_vbo:
            shift = row * s
            x_low = coords < 0
            x_high = coords + 1 >= row
            a[:, x_low, 0] -= shift
            b[:, x_low, 0] -= shift
            c[:, x_high, 0] += shift
            d[:, x_high, 0] += shift
            y_low = coords < 0
            y_high = coords + 1 >= row
            a[y_low, :, 1] += shift
            c[y_low, :, 1] += shift
            b[y_high, :, 1] -= shift
            d[y_high, :, 1] -= shift
        else:
            b += (0.0, -s, 0.0)
            c += (s, 0.0, 0.0)
            d += (s, -s, 0.0)

        v1 = b - a
        v2 = b - c
        v3 = b - d
        n1 = np.cross(v2, v1)
        n2 = np.cross(v3, v2)

        acc = np.zeros((row + 2, row + 2, 3))
        acc[0 : row + 1, 0 : row + 1] += n1
        acc[1 : row + 2, 0 : row + 1] += n1 + n2
        acc[0 : row + 1, 1 : row + 2] += n1 + n2
        acc[1 : row + 2, 1 : row + 2] += n2

        length = np.linalg.norm(acc, axis=-1, keepdims=True)
        acc = np.divide(acc, length, out=np.zeros_like(acc), where=length > 0.0)
        self._normals = acc[1 : row + 1, 1 : row + 1].copy()

    def _grid_interp(self, lx: int, hx: int, ly: int, hy: int, tx: int, ty: int) -> float:
        s00 = self.get_vertex(lx, ly)[2]
        s01 = self.get_vertex(hx, ly)[2]
        s10 = self.get_vertex(lx, hy)[2]
        s11 = self.get_vertex(hx, hy)[2]
        dx = hx - lx
        dtx = tx - lx
        v0 = (s01 - s00) / dx * dtx + s00
        v1 = (s11 - s10) / dx * dtx + s10
        return float((v1 - v0) / (hy - ly) * (ty - ly) + v0)

    def compute_max_delta(self) -> float:
        """Largest height error of coarser mip levels; stored in ``max_delta``."""
        delta_max = 0.0
        step = 2
        for _level in range(1, 6):
            for i in range(self._resolution):
                pos_y = i // step * step
                for j in range(self._resolution):
                    if i % step != 0 or j % step != 0:
                        pos_x = j // step * step
                        delta = self._grid_interp(
                            pos_x, pos_x + step, pos_y, pos_y + step, j, i
                        )
                        delta = abs(delta - self.get_vertex(j, i)[2])
                        delta_max = max(delta_max, delta)
            step *= 2
        self._max_delta = delta_max
        return delta_max

    def _cell(self, x: float, y: float) -> tuple[int, int, float, float]:
        dx = x / self._spacing
        dy = y / self._spacing
        ix = int(dx)
        iy = int(dy)
        return ix, iy, dx - ix, dy - iy

    def bilinear_interp(self, x: float, y: float) -> float:
        """Height at local position ``(x, y)``; zero for negative coordinates."""
        if x >= 0.0 and y >= 0.0:
            ix, iy, dx, dy = self._cell(x, y)
            s00 = self.get_vertex(ix, iy)[2]
            s01 = self.get_vertex(ix + 1, iy)[2]
            s10 = self.get_vertex(ix, iy + 1)[2]
            s11 = self.get_vertex(ix + 1, iy + 1)[2]
            return float(
                s00 * (1.0 - dx) * (1.0 - dy)
                + s01 * dx * (1.0 - dy)
                + s10 * (1.0 - dx) * dy
                + s11 * dx * dy
            )
        return 0.0

    def normal_bilinear_interp(self, x: float, y: float) -> np.ndarray:
        """Interpolated normal at ``(x, y)``; straight up for negative coordinates."""
        if x >= 0.0 and y >= 0.0:
            ix, iy, dx, dy = self._cell(x, y)
            s00 = self.get_normal(ix, iy)
            s01 = self.get_normal(ix + 1, iy)
            s10 = self.get_normal(ix, iy + 1)
            s11 = self.get_normal(ix + 1, iy + 1)
            return (
                s00 * (1.0 - dx) * (1.0 - dy)
                + s01 * dx * (1.0 - dy)
                + s10 * (1.0 - dx) * dy
                + s11 * dx * dy
            )
        return np.array(_UP)

    def create_normal_map(self) -> np.ndarray:
        """RGB normal map of shape (resolution, resolution, 3), dtype uint8."""
        res = self._resolution
        n = self._normals[:res, :res]
        return (127.0 * n + 128.0).astype(np.uint8)