import math

import numpy as np
import pytest

from oceansim.godray_blend import GodRayBlendSurface
from oceansim.ocean_technique import CameraState


def _proj():
    return CameraState.perspective(90.0, 1.0, 1.0, 100.0).projection


def test_build_creates_quad_and_uniforms():
    surface = GodRayBlendSurface((-1.0, -1.0, -1.0), (2.0, 2.0), (512, 384))
    assert surface.quad is not None
    assert len(surface.quad.vertices) == 4
    assert surface.quad.tex_coords[3] == (512.0, 384.0)
    assert surface.uniforms["osgOcean_GodRayTexture"] == 0
    assert surface.uniforms["osgOcean_Intensity"] == pytest.approx(0.2)
    assert surface.blend == ("SRC_ALPHA", "ONE")
    assert surface.normals.shape == (4, 3)


def test_unbuilt_surface_has_no_uniforms():
    surface = GodRayBlendSurface()
    assert surface.quad is None
    assert surface.uniforms == {}


def test_eccentricity_updates_phase_terms():
    surface = GodRayBlendSurface((-1.0, -1.0, -1.0), (2.0, 2.0), (8, 8))
    surface.eccentricity = 0.3
    hgg = surface.uniforms["osgOcean_HGg"]
    assert hgg == surface.hgg
    assert hgg[0] + hgg[1] == pytest.approx(2.0)
    assert hgg[2] / 2.0 == pytest.approx(0.3)
    assert hgg[1] - 1.0 == pytest.approx(0.3 ** 2)


def test_setters_update_uniforms():
    surface = GodRayBlendSurface((-1.0, -1.0, -1.0), (2.0, 2.0), (8, 8))
    surface.intensity = 0.1
    surface.sun_direction = (0.5, 0.0, -1.0)
    assert surface.uniforms["osgOcean_Intensity"] == pytest.approx(0.1)
    assert surface.uniforms["osgOcean_SunDir"] == (0.5, 0.0, -1.0)


def test_update_identity_view_reaches_far_plane():
    surface = GodRayBlendSurface((-1.0, -1.0, -1.0), (2.0, 2.0), (8, 8))
    normals = surface.update(np.eye(4), _proj())
    assert np.allclose(normals[:, 2], -100.0)
    assert np.allclose(np.abs(normals[:, :2]), 100.0)
    assert np.allclose(normals[0], (-100.0, 100.0, -100.0))
    assert np.allclose(surface.normals, normals)


def test_update_translated_view_shifts_rays():
    surface = GodRayBlendSurface((-1.0, -1.0, -1.0), (2.0, 2.0), (8, 8))
    base = surface.update(np.eye(4), _proj())
    view = np.eye(4)
    view[3, :3] = (1.0, 2.0, 3.0)
    moved = surface.update(view, _proj())
    assert np.allclose(moved, base - np.array([1.0, 2.0, 3.0]))


def test_update_rotated_view_preserves_lengths():
    surface = GodRayBlendSurface((-1.0, -1.0, -1.0), (2.0, 2.0), (8, 8))
    base = surface.update(np.eye(4), _proj())
    a = math.radians(30.0)
    view = np.eye(4)
    view[:2, :2] = [[math.cos(a), math.sin(a)], [-math.sin(a), math.cos(a)]]
    rotated = surface.update(view, _proj())
    assert np.allclose(np.linalg.norm(rotated, axis=1), np.linalg.norm(base, axis=1))
    assert not np.allclose(rotated, base)


def test_update_rejects_singular_view():
    surface = GodRayBlendSurface((-1.0, -1.0, -1.0), (2.0, 2.0), (8, 8))
    with pytest.raises(ValueError):
        surface.update(np.zeros((4, 4)), _proj())


def test_update_rejects_bad_shape():
    surface = GodRayBlendSurface()
    with pytest.raises(ValueError):
        surface.update(np.eye(3), _proj())