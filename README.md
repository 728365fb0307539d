# oceansim

Scene logic for rendering an ocean: surface tiles with smoothed normals and
level-of-detail averaging, underwater god rays, and the planning of the
render-to-texture passes an ocean scene needs (reflections, refractions,
height map, depth of field, glare, silt).

The package works on plain numbers and numpy arrays; it does not open a
window or talk to a graphics driver. Geometry, textures, uniforms and passes
are described as data that a renderer can consume.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Surface tiles

`OceanTile` takes a square height field (`resolution * resolution` values,
row by row) and optional per-point `(x, y)` displacements, and builds
`(resolution + 1)` squared vertices whose last row and column repeat the
first, so neighbouring tiles join without seams.

```python
import numpy as np
from oceansim.ocean_tile import OceanTile

heights = np.random.default_rng(1).normal(size=64 * 64)
tile = OceanTile(heights, resolution=64, spacing=4.0)
lower = OceanTile.from_parent(tile, resolution=32, spacing=8.0)

tile.average_height, tile.maximum_height
height = tile.bilinear_interp(10.0, 12.0)         # 0.0 for negative coordinates
normal = tile.normal_bilinear_interp(10.0, 12.0)  # (0, 0, 1) for negative coordinates
normal_map = tile.create_normal_map()             # (64, 64, 3) uint8 array
tile.compute_max_delta()                          # stored in tile.max_delta
```

With `use_vbo=True` the vertices carry their grid position
(`x * spacing`, `-y * spacing`) as well as any displacement.

## Visibility and cameras

`oceansim.ocean_technique` holds `CameraState` (a projection matrix and look
direction, with `perspective(...)` and `orthographic(...)` constructors),
`OceanTechnique`, the base surface with a conservative `is_visible(camera,
eye_above_water)` test, and `add_resource_paths(path_list)`, which appends
the shader and texture resource directories when they are missing.

## God rays

```python
from oceansim.godrays import GodRays, refract

rays = GodRays(num_of_rays=10, sun_dir=(0.0, 0.0, -1.0), base_water_height=0.0)
underwater = rays.update(time=1.0, eye=(0.0, 0.0, -20.0), fov=45.0)
rays.uniforms["osgOcean_Spacing"], rays.uniforms["osgOcean_Origin"]
```

`refract(ratio, incident, normal)` raises `ValueError` on total internal
reflection. `GodRayBlendSurface` (in `oceansim.godray_blend`) is the
screen-aligned quad that blends the god ray texture over the scene;
`update(view, proj)` sets its corner normals to the world-space rays through
the corners of the far plane.

## Render passes

`oceansim.render_passes` provides `Texture`, `TextureFormat` and
`RenderPass`, and builders for each step of the post-processing chains:
`create_texture_2d`, `create_texture_rectangle`, `create_screen_quad`,
`render_to_texture_pass`, `multiple_render_target_pass`, `godray_final_pass`,
`downsample_pass`, `gaussian_pass`, `dof_combiner_pass`, `glare_pass` and
`glare_combiner_pass`. `oceansim.screen_quad.ScreenAlignedQuad` is the
textured quad these passes draw.

## The ocean scene

```python
from oceansim.ocean_scene import OceanScene
from oceansim.ocean_technique import OceanTechnique

scene = OceanScene(OceanTechnique())
scene.reflections_enabled = True
scene.glare_enabled = True
scene.init()                       # builds the enabled effects and pass chains

view = scene.view_data("main")
view.update_state(eye=(0.0, 0.0, 10.0), eye_above_water=True, viewport=(1024, 768))
passes = view.active_passes(surface_visible=True)
```

Changing any effect switch or `surface_height` marks the scene dirty until
`init()` runs again. `enable_rtt_effects_for_view(view, False)` turns the
render-to-texture effects off for one view, and `child_mask(mask)` gives the
node mask a plain scene child should carry.

`oceansim.scene_events` adds `SceneEventHandler`, which maps released keys
to effect toggles and surface moves (`usage()` lists the bindings), and
`CylinderTracker`, whose `cylinder_offset(eye)` places the fog-coloured
cylinder under the eye.

## What this package does not do

It does not generate wave heights: the height field and displacements given
to `OceanTile` must come from elsewhere. It also has no mip-level mesh
layout, and it does not render anything; shader names in the passes are
labels for a renderer to resolve.