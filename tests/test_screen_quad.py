from oceansim.screen_quad import ScreenAlignedQuad


def test_empty_quad_without_arguments():
    quad = ScreenAlignedQuad()
    assert quad.vertices == []
    assert quad.primitives == []


def test_missing_texture_leaves_quad_empty():
    quad = ScreenAlignedQuad((0.0, 0.0, 0.0), (2.0, 2.0), None)
    assert quad.vertices == []
    assert quad.modes == {}


def test_vertices_span_dims_from_corner():
    corner = (-1.0, -1.0, -1.0)
    quad = ScreenAlignedQuad(corner, (2.0, 2.0), (512, 384))
    assert quad.vertices[1] == corner
    xs = {v[0] for v in quad.vertices}
    ys = {v[1] for v in quad.vertices}
    assert max(xs) - min(xs) == 2.0
    assert max(ys) - min(ys) == 2.0
    assert all(v[2] == -1.0 for v in quad.vertices)


def test_tex_coords_follow_texture_size():
    quad = ScreenAlignedQuad((0.0, 0.0, 0.0), (1.0, 1.0), (512, 384))
    assert quad.tex_coords == [(0.0, 384.0), (0.0, 0.0), (512.0, 0.0), (512.0, 384.0)]


def test_overall_colour_normal_and_modes():
    quad = ScreenAlignedQuad((0.0, 0.0, 0.0), (1.0, 1.0), (4, 4))
    assert quad.colors == [(1.0, 1.0, 1.0, 1.0)]
    assert quad.normals == [(0.0, -1.0, 0.0)]
    assert quad.primitives == [("QUADS", 0, 4)]
    assert quad.modes == {"lighting": False, "depth_test": False}


def test_rebuild_replaces_vertices_and_adds_primitive():
    quad = ScreenAlignedQuad((0.0, 0.0, 0.0), (1.0, 1.0), (4, 4))
    quad.build((5.0, 5.0, 0.0), (1.0, 1.0), (8, 8))
    assert quad.vertices[1] == (5.0, 5.0, 0.0)
    assert quad.tex_coords[3] == (8.0, 8.0)
    assert len(quad.primitives) == 2