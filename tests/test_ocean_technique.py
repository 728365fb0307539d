import pytest

from oceansim.ocean_technique import CameraState, OceanTechnique, add_resource_paths


def test_default_heights_are_zero():
    technique = OceanTechnique()
    assert technique.get_surface_height() == 0.0
    assert technique.get_maximum_height() == 0.0


def test_dirty_and_build():
    technique = OceanTechnique()
    assert technique.is_dirty is True
    technique.build()
    assert technique.is_dirty is False
    technique.dirty()
    assert technique.is_dirty is True


def test_hidden_node_is_never_visible():
    technique = OceanTechnique(node_mask=0)
    camera = CameraState.perspective(30.0, 1.0, 1.0, 100.0)
    assert technique.is_visible(camera, True) is False
    assert technique.is_visible(camera, False) is False


def test_orthographic_is_always_visible():
    technique = OceanTechnique()
    camera = CameraState.orthographic(-1, 1, -1, 1, 1, 10, look_vector=(0, 0, 100))
    assert camera.is_perspective is False
    assert technique.is_visible(camera, True) is True
    assert technique.is_visible(camera, False) is True


def test_perspective_fov_round_trip():
    camera = CameraState.perspective(45.0, 1.5, 0.5, 500.0)
    assert camera.is_perspective is True
    assert camera.fovy == pytest.approx(45.0)


def test_visibility_against_cutoff():
    technique = OceanTechnique()
    down = CameraState.perspective(30.0, 1.0, 1.0, 100.0, look_vector=(0, 0, -1))
    assert technique.is_visible(down, True) is True
    assert technique.is_visible(down, False) is True

    far_up = CameraState.perspective(30.0, 1.0, 1.0, 100.0, look_vector=(0, 0, 50))
    assert technique.is_visible(far_up, True) is False
    assert technique.is_visible(far_up, False) is True

    far_down = CameraState.perspective(30.0, 1.0, 1.0, 100.0, look_vector=(0, 0, -50))
    assert technique.is_visible(far_down, False) is False
    assert technique.is_visible(far_down, True) is True


def test_camera_state_validation():
    with pytest.raises(ValueError):
        CameraState([[1, 0], [0, 1]])
    with pytest.raises(ValueError):
        CameraState.perspective(30.0, 1.0, 1.0, 10.0, look_vector=(0, 1))


def test_add_resource_paths_to_empty_list():
    paths = []
    add_resource_paths(paths)
    assert paths == ["resources/textures/", "resources/shaders/"]


def test_add_resource_paths_is_idempotent():
    paths = ["data/", "resources/shaders/"]
    add_resource_paths(paths)
    add_resource_paths(paths)
    assert paths == ["data/", "resources/shaders/", "resources/textures/"]