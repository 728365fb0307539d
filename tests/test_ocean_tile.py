import numpy as np
import pytest

from oceansim.ocean_tile import OceanTile


def _random_heights(res, seed=1):
    return np.random.default_rng(seed).normal(size=res * res)


def test_vertex_count_and_wrapping():
    tile = OceanTile(np.arange(16.0), 4, 2.0, use_vbo=True)
    assert tile.row_length == 5
    assert tile.num_vertices == 25
    assert tile.vertices.shape == (25, 3)
    for y in range(5):
        assert tile.get_vertex(4, y)[2] == tile.get_vertex(0, y)[2]
    for x in range(5):
        assert tile.get_vertex(x, 4)[2] == tile.get_vertex(x, 0)[2]


def test_vbo_positions_follow_grid():
    tile = OceanTile(np.arange(16.0), 4, 2.0, use_vbo=True)
    np.testing.assert_allclose(tile.get_vertex(2, 3), [4.0, -6.0, 14.0])


def test_non_vbo_positions_are_displacements():
    disp = np.column_stack((np.arange(16.0), -np.arange(16.0)))
    tile = OceanTile(np.zeros(16), 4, 1.0, displacements=disp)
    np.testing.assert_allclose(tile.get_vertex(1, 2), [9.0, -9.0, 0.0])
    np.testing.assert_allclose(tile.get_vertex(0, 0), [0.0, 0.0, 0.0])


def test_height_statistics():
    tile = OceanTile(np.arange(16.0), 4, 1.0)
    assert tile.maximum_height == 15.0
    assert tile.average_height == pytest.approx(tile.vertices[:, 2].mean())


@pytest.mark.parametrize("use_vbo", [True, False])
def test_flat_surface_normals_point_up(use_vbo):
    tile = OceanTile(np.zeros(64), 8, 1.5, use_vbo=use_vbo)
    normals = tile.normals
    np.testing.assert_allclose(normals, np.tile([0.0, 0.0, 1.0], (81, 1)), atol=1e-12)


@pytest.mark.parametrize("use_vbo", [True, False])
def test_normals_are_unit_length(use_vbo):
    tile = OceanTile(_random_heights(8), 8, 1.0, use_vbo=use_vbo)
    lengths = np.linalg.norm(tile.normals, axis=1)
    np.testing.assert_allclose(lengths, 1.0)
    assert np.all(tile.normals[:, 2] > 0.0)


def test_flat_normal_map():
    tile = OceanTile(np.zeros(16), 4, 1.0)
    pixels = tile.create_normal_map()
    assert pixels.shape == (4, 4, 3)
    assert pixels.dtype == np.uint8
    assert np.all(pixels[..., 0] == 128)
    assert np.all(pixels[..., 1] == 128)
    assert np.all(pixels[..., 2] == 255)


def test_bilinear_matches_grid_points():
    tile = OceanTile(_random_heights(4), 4, 2.0)
    for x, y in [(0, 0), (1, 2), (3, 1), (2, 3)]:
        assert tile.bilinear_interp(x * 2.0, y * 2.0) == pytest.approx(
            tile.get_vertex(x, y)[2]
        )


def test_bilinear_cell_centre_is_corner_mean():
    tile = OceanTile(_random_heights(4), 4, 2.0)
    corners = [tile.get_vertex(x, y)[2] for x in (0, 1) for y in (0, 1)]
    assert tile.bilinear_interp(1.0, 1.0) == pytest.approx(np.mean(corners))


def test_negative_coordinates_fall_back():
    tile = OceanTile(_random_heights(4), 4, 1.0)
    assert tile.bilinear_interp(-0.5, 1.0) == 0.0
    np.testing.assert_allclose(tile.normal_bilinear_interp(1.0, -2.0), [0.0, 0.0, 1.0])


def test_normal_interp_at_grid_point():
    tile = OceanTile(_random_heights(4), 4, 1.0)
    np.testing.assert_allclose(tile.normal_bilinear_interp(2.0, 1.0), tile.get_normal(2, 1))


def test_from_parent_constant_heights():
    parent = OceanTile(np.full(64, 3.0), 8, 1.0)
    child = OceanTile.from_parent(parent, 4, 2.0)
    assert child.resolution == 4
    assert child.row_length == 5
    np.testing.assert_allclose(child.vertices[:, 2], 3.0)
    for x in range(5):
        np.testing.assert_allclose(child.get_vertex(x, 4), child.get_vertex(x, 0))


def test_from_parent_averages_four_vertices():
    parent = OceanTile(np.arange(64.0), 8, 1.0, use_vbo=True)
    child = OceanTile.from_parent(parent, 4, 2.0)
    expected = np.mean(
        [parent.get_vertex(x, y) for x in (0, 1) for y in (0, 1)], axis=0
    )
    np.testing.assert_allclose(child.get_vertex(0, 0), expected)
    assert child.use_vbo is True
    np.testing.assert_allclose(child.get_vertex(4, 2), child.get_vertex(0, 2))


def test_max_delta_flat_and_spike():
    flat = OceanTile(np.zeros(32 * 32), 32, 1.0)
    assert flat.compute_max_delta() == 0.0
    heights = np.zeros(32 * 32)
    heights[1 * 32 + 1] = 1.0
    spike = OceanTile(heights, 32, 1.0)
    assert spike.compute_max_delta() == pytest.approx(1.0)
    assert spike.max_delta == pytest.approx(1.0)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        OceanTile([], 0, 1.0)
    with pytest.raises(ValueError):
        OceanTile(np.zeros(10), 4, 1.0)
    parent = OceanTile(np.zeros(64), 8, 1.0)
    with pytest.raises(ValueError):
        OceanTile.from_parent(parent, 3, 1.0)
    with pytest.raises(IndexError):
        parent.get_vertex(-1, 0)