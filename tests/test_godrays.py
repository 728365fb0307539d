import math

import numpy as np
import pytest

from oceansim.godrays import GLARE_BOUND, GLARE_IMAGE, SHAFT_BOUND, GodRays, refract


def test_refract_straight_down_is_unchanged():
    result = refract(0.75, (0.0, 0.0, -1.0), (0.0, 0.0, 1.0))
    assert np.allclose(result, (0.0, 0.0, -1.0))


@pytest.mark.parametrize("angle", [10.0, 30.0, 45.0, 60.0])
def test_refract_preserves_length_and_scales_tangent(angle):
    a = math.radians(angle)
    incident = (math.sin(a), 0.0, -math.cos(a))
    result = refract(0.75, incident, (0.0, 0.0, 1.0))
    assert np.linalg.norm(result) == pytest.approx(1.0)
    assert result[0] == pytest.approx(0.75 * incident[0])
    assert result[2] < 0.0


def test_refract_total_internal_reflection_raises():
    a = math.radians(80.0)
    with pytest.raises(ValueError):
        refract(1.5, (math.sin(a), 0.0, -math.cos(a)), (0.0, 0.0, 1.0))


def test_invalid_ray_count():
    with pytest.raises(ValueError):
        GodRays(0)


def test_ray_shafts_layout():
    rays = GodRays(10)
    geom = rays.create_ray_shafts()
    assert geom.vertices.shape == (200, 3)
    assert len(geom.primitives) == 25
    assert geom.initial_bound == SHAFT_BOUND
    assert np.allclose(geom.vertices[:, :2].mean(axis=0), (0.0, 0.0))
    for mode, indices in geom.primitives:
        assert mode == "TRIANGLE_STRIP"
        assert len(indices) == 6
        for upper, lower in zip(indices[::2], indices[1::2]):
            assert lower - upper == 10
            assert np.allclose(geom.vertices[upper], geom.vertices[lower])
            assert np.allclose(geom.tex_coords[upper], (0.0, 0.0))
            assert geom.tex_coords[lower][0] > 0.0


def test_first_shaft_indices():
    geom = GodRays(10).create_ray_shafts()
    assert geom.primitives[0][1] == [20, 30, 21, 31, 1, 11]


def test_glare_quad():
    geom = GodRays().create_glare_quad()
    assert geom.texture == GLARE_IMAGE
    assert geom.initial_bound == GLARE_BOUND
    assert geom.primitives == [("QUADS", [0, 1, 2, 3])]
    assert geom.uniforms["osgOcean_GlareTexture"] == 0
    assert np.allclose(geom.vertices.sum(axis=0), (0.0, 0.0, 0.0))


def test_update_above_water_only_builds():
    rays = GodRays(10, (0.0, 0.0, -1.0), 0.0)
    assert rays.update(1.0, (0.0, 0.0, 5.0), 45.0) is False
    assert rays.is_dirty is False
    assert rays.is_state_dirty is False
    assert len(rays.drawables) == 2
    assert rays.uniforms["osgOcean_Eye"] == (0.0, 0.0, 0.0)
    assert rays.uniforms["osgOcean_Spacing"] == 1.0


def test_update_underwater_sets_uniforms():
    rays = GodRays(10, (0.3, 0.1, -1.0), 2.0)
    eye = (5.0, -3.0, -10.0)
    assert rays.update(4.0, eye, 90.0) is True
    assert rays.uniforms["osgOcean_Eye"] == eye
    origin = rays.uniforms["osgOcean_Origin"]
    assert origin[2] == pytest.approx(2.0)
    depth = -eye[2] * 2.0
    assert rays.uniforms["osgOcean_Spacing"] == pytest.approx(0.2 * depth / 10)
    assert rays.wave_time == pytest.approx(2.0)


def test_update_vertical_sun_origin_above_eye():
    rays = GodRays(10, (0.0, 0.0, -1.0), 0.0)
    rays.update(0.0, (7.0, 8.0, -20.0), 60.0)
    origin = rays.uniforms["osgOcean_Origin"]
    assert origin == pytest.approx((7.0, 8.0, 0.0))
    assert rays.bounds_dirty is False


def test_deep_eye_marks_bounds_dirty():
    rays = GodRays()
    rays.update(0.0, (0.0, 0.0, -5000.0), 45.0)
    assert rays.bounds_dirty is True


def test_compute_bound_follows_eye():
    rays = GodRays()
    rays.eye = (10.0, -4.0, -1.0)
    bound = rays.compute_bound(SHAFT_BOUND)
    assert bound[0] - SHAFT_BOUND[0] == pytest.approx(10.0)
    assert bound[4] - SHAFT_BOUND[4] == pytest.approx(-4.0)
    assert bound[2] == SHAFT_BOUND[2]
    assert bound[5] == SHAFT_BOUND[5]