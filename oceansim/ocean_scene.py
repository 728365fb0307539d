"""Ocean scene: render effect configuration and per-view render state."""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional, Sequence

import numpy as np

from oceansim.godray_blend import GodRayBlendSurface
from oceansim.godrays import GodRays
from oceansim.ocean_technique import OceanTechnique, add_resource_paths
from oceansim.render_passes import (
    FRAME_BUFFER_OBJECT,
    INHERIT_VIEWPOINT,
    PRE_RENDER,
    RenderPass,
    Texture,
    TextureFormat,
    create_texture_2d,
    create_texture_rectangle,
    dof_combiner_pass,
    downsample_pass,
    gaussian_pass,
    glare_combiner_pass,
    glare_pass,
    godray_final_pass,
    multiple_render_target_pass,
    render_to_texture_pass,
)

__all__ = ["ViewData", "OceanScene"]

LOG2E = 1.442695
OCEAN_CYLINDER_HEIGHT = 4000.0
OCEAN_CYLINDER_RADIUS = 1900.0
GODRAY_CLEAR_COLOR = (0.0745098, 0.10588235, 0.1529411, 1.0)
_GLARE_DIRECTIONS = ((0.5, 0.5), (-0.5, -0.5), (0.5, -0.5), (-0.5, 0.5))

Vec3 = tuple[float, float, float]
Vec4 = tuple[float, float, float, float]


class _Option:
    """Scene setting whose change requires the scene to be rebuilt."""

    def __init__(self, default: Any, convert: Callable[[Any], Any]) -> None:
        self.default = default
        self.convert = convert
        self.attr = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.attr = "_opt_" + name

    def __get__(self, obj: Any, objtype: Optional[type] = None) -> Any:
        if obj is None:
            return self
        return obj.__dict__.get(self.attr, self.default)

    def __set__(self, obj: Any, value: Any) -> None:
        obj.__dict__[self.attr] = self.convert(value)
        obj.is_dirty = True


def _vec(value: Sequence[float], size: int) -> tuple:
    result = tuple(float(c) for c in value)
    if len(result) != size:
        raise ValueError(f"expected {size} components, got {len(result)}")
    return result


@dataclass
class _Fog:
    mode: str
    density: float
    color: Vec4


def _reflection_matrix(surface_height: float) -> np.ndarray:
    m = np.identity(4)
    m[2, 2] = -1.0
    m[3, 2] = 2.0 * surface_height
    return m


class ViewData:
    """Render-to-texture cameras and uniforms belonging to one view."""

    def __init__(self, scene: "OceanScene") -> None:
        self.lock = threading.Lock()
        self.scene = scene
        self._build()

    def _build(self) -> None:
        scene = self.scene
        self.global_uniforms: dict[str, object] = {
            "osgOcean_EyeUnderwater": False,
            "osgOcean_Eye": (0.0, 0.0, 0.0),
        }
        self.surface_uniforms: dict[str, object] = {
            "osgOcean_EnableReflections": scene.reflections_enabled,
            "osgOcean_ReflectionMap": scene.reflection_unit,
            "osgOcean_EnableRefractions": scene.refractions_enabled,
            "osgOcean_RefractionMap": scene.refraction_unit,
            "osgOcean_RefractionDepthMap": scene.refraction_depth_unit,
            "osgOcean_EnableHeightmap": scene.heightmap_enabled,
            "osgOcean_Heightmap": scene.heightmap_unit,
            "osgOcean_RefractionInverseTransformation": np.identity(4),
            "osgOcean_ViewportDimensions": (
                float(scene.screen_dims[0]),
                float(scene.screen_dims[1]),
            ),
        }
        self.surface_textures: dict[int, Texture] = {}
        self.fog = _Fog("EXP2", scene.above_water_fog_density, scene.above_water_fog_color)
        self.reflection_matrix = np.identity(4)
        self.reflection_camera: Optional[RenderPass] = None
        self.refraction_camera: Optional[RenderPass] = None
        self.heightmap_camera: Optional[RenderPass] = None

        if scene.reflections_enabled:
            self.reflection_matrix = _reflection_matrix(scene.surface_height)
            texture = create_texture_2d(scene.reflection_tex_size, TextureFormat.RGBA)
            cam = render_to_texture_pass(texture)
            cam.clear_color = (0.0, 0.0, 0.0, 0.0)
            cam.compute_near_far = False
            cam.cull_mask = scene.reflection_scene_mask
            cam.modes["clip_plane0"] = True
            cam.modes["cull_face"] = False
            self.reflection_camera = cam
            self.surface_textures[scene.reflection_unit] = texture

        if scene.refractions_enabled:
            color = create_texture_2d(scene.refraction_tex_size, TextureFormat.RGBA)
            color.min_filter = "NEAREST"
            color.mag_filter = "NEAREST"
            depth = create_texture_2d(scene.refraction_tex_size, TextureFormat.DEPTH_COMPONENT)
            cam = multiple_render_target_pass(color, "COLOR_BUFFER", depth, "DEPTH_BUFFER")
            cam.clear_depth = 1.0
            cam.clear_color = (0.0, 0.0, 0.0, 0.0)
            cam.compute_near_far = False
            cam.cull_mask = scene.refraction_scene_mask
            self.refraction_camera = cam
            self.surface_textures[scene.refraction_unit] = color
            self.surface_textures[scene.refraction_depth_unit] = depth

        if scene.heightmap_enabled:
            texture = create_texture_2d(scene.refraction_tex_size, TextureFormat.DEPTH_COMPONENT)
            cam = RenderPass(
                viewport=(0, 0, texture.width, texture.height),
                clear_mask=frozenset({"depth"}),
                clear_depth=1.0,
                reference_frame=INHERIT_VIEWPOINT,
                render_target=FRAME_BUFFER_OBJECT,
                render_order=(PRE_RENDER, 0),
                attachments={"DEPTH_BUFFER": texture},
                cull_mask=scene.heightmap_mask,
                compute_near_far=False,
                program="heightmap",
            )
            cam.modes["depth_test"] = True
            self.heightmap_camera = cam
            self.surface_textures[scene.heightmap_unit] = texture

        self.dirty = False

    def update_state(
        self,
        eye: Sequence[float],
        eye_above_water: bool,
        viewport: Sequence[float],
        view: Optional[Hashable] = None,
    ) -> None:
        """Refresh eye, fog and effect switches for the current frame."""
        scene = self.scene
        eye_v = _vec(eye, 3)
        width, height = _vec(viewport, 2)

        self.global_uniforms["osgOcean_EyeUnderwater"] = not eye_above_water
        self.global_uniforms["osgOcean_Eye"] = eye_v

        if eye_above_water:
            density, color = scene.above_water_fog_density, scene.above_water_fog_color
        else:
            density, color = scene.underwater_fog_density, scene.underwater_fog_color
        self.fog.density = density
        self.fog.color = color

        self.surface_uniforms["osgOcean_ViewportDimensions"] = (width, height)

        enabled = view not in scene.views_with_rtt_disabled
        reflection = (
            scene.reflections_enabled
            and eye_above_water
            and enabled
            and eye_v[2] < scene.eye_height_reflection_cutoff - scene.surface_height
        )
        self.surface_uniforms["osgOcean_EnableReflections"] = reflection
        if reflection:
            self.reflection_matrix = _reflection_matrix(scene.surface_height)

        # Refractions are needed above water too, for shoreline foam.
        self.surface_uniforms["osgOcean_EnableRefractions"] = (
            scene.refractions_enabled and enabled
        )
        self.surface_uniforms["osgOcean_EnableHeightmap"] = (
            scene.heightmap_enabled and eye_above_water and enabled
        )

    def active_passes(self, surface_visible: bool) -> list[RenderPass]:
        """Cameras to render this frame: refraction, reflection, heightmap."""
        if not surface_visible:
            return []
        switches = (
            ("osgOcean_EnableRefractions", self.refraction_camera),
            ("osgOcean_EnableReflections", self.reflection_camera),
            ("osgOcean_EnableHeightmap", self.heightmap_camera),
        )
        return [
            cam
            for name, cam in switches
            if cam is not None and self.surface_uniforms[name]
        ]


class OceanScene:
    """Ocean surface together with its reflections, refractions and screen effects."""

    reflections_enabled = _Option(False, bool)
    refractions_enabled = _Option(False, bool)
    heightmap_enabled = _Option(False, bool)
    god_rays_enabled = _Option(False, bool)
    silt_enabled = _Option(False, bool)
    underwater_dof_enabled = _Option(False, bool)
    glare_enabled = _Option(False, bool)
    distortion_enabled = _Option(False, bool)
    underwater_scattering_enabled = _Option(False, bool)
    default_shader_enabled = _Option(True, bool)
    surface_height = _Option(0.0, float)

    def __init__(self, technique: Optional[OceanTechnique] = None) -> None:
        self.is_dirty = True
        self.technique = technique

        self.reflection_tex_size = (512, 512)
        self.refraction_tex_size = (512, 512)
        self.screen_dims = (1024, 768)
        self.sun_direction: Vec3 = (0.0, 0.0, -1.0)

        self.reflection_unit = 1
        self.refraction_unit = 2
        self.refraction_depth_unit = 3
        self.heightmap_unit = 7

        self.reflection_scene_mask = 0x1
        self.refraction_scene_mask = 0x2
        self.normal_scene_mask = 0x4
        self.surface_mask = 0x8
        self.silt_mask = 0x10
        self.heightmap_mask = 0x20

        self.light_id = 0
        self.dof_near = 0.0
        self.dof_far = 160.0
        self.dof_focus = 30.0
        self.dof_far_clamp = 1.0
        self.glare_threshold = 0.9
        self.glare_attenuation = 0.75

        self.underwater_fog_color: Vec4 = (0.2274509, 0.4352941, 0.7294117, 1.0)
        self.above_water_fog_color: Vec4 = (0.0, 0.0, 0.0, 0.0)
        self.underwater_diffuse: Vec4 = (0.0, 0.0, 0.0, 0.0)
        self.underwater_attenuation: Vec3 = (0.015, 0.0075, 0.005)
        self.underwater_fog_density = 0.01
        self.above_water_fog_density = 0.0012
        self.eye_height_reflection_cutoff = math.inf
        self.eye_height_refraction_cutoff = -math.inf

        self.cylinder_radius = OCEAN_CYLINDER_RADIUS
        self.cylinder_height = OCEAN_CYLINDER_HEIGHT
        self.cylinder_color = self.underwater_fog_color
        self.cylinder_mask = self.normal_scene_mask | self.refraction_scene_mask
        self.ocean_transform_mask = self.normal_scene_mask | self.surface_mask

        if technique is not None:
            technique.node_mask = self.surface_mask

        self.data_file_paths: list[str] = []
        add_resource_paths(self.data_file_paths)
        self.global_definitions: dict[str, object] = {"osgOcean_LightID": self.light_id}
        self.default_scene_shader = "scene_shader"

        self.views_with_rtt_disabled: set[Hashable] = set()
        self._view_data: dict[Hashable, ViewData] = {}
        self._view_lock = threading.Lock()
        self._reset_effects()

    def _reset_effects(self) -> None:
        self.global_uniforms: dict[str, object] = {}
        self.global_program: Optional[str] = None
        self.reflection_clip_plane: Optional[Vec4] = None
        self.godrays: Optional[GodRays] = None
        self.godray_pre_render: Optional[RenderPass] = None
        self.godray_blend_surface: Optional[GodRayBlendSurface] = None
        self.godray_post_render: Optional[RenderPass] = None
        self.dof_passes: list[RenderPass] = []
        self.glare_passes: list[RenderPass] = []
        self.silt: Optional[dict[str, object]] = None
        self.silt_clip_plane: Optional[Vec4] = None

    def init(self) -> None:
        """Rebuild every enabled effect from the current settings."""
        self._reset_effects()
        if self.technique is not None:
            self._build_global_state()
            h = self.surface_height
            if self.reflections_enabled:
                self.reflection_clip_plane = (0.0, 0.0, 1.0, -h)
            if self.god_rays_enabled:
                self._build_god_rays()
            if self.underwater_dof_enabled:
                self._build_dof()
            if self.glare_enabled:
                self._build_glare()
            if self.silt_enabled:
                self.silt = {
                    "intensity": 0.07,
                    "particle_speed": 0.025,
                    "node_mask": self.silt_mask,
                    "clip_plane1": True,
                }
                self.silt_clip_plane = (0.0, 0.0, -1.0, -h)
        with self._view_lock:
            for data in self._view_data.values():
                data.dirty = True
        self.is_dirty = False

    def _build_global_state(self) -> None:
        self.global_uniforms = {
            "osgOcean_EnableDOF": self.underwater_dof_enabled,
            "osgOcean_EnableGlare": self.glare_enabled,
            "osgOcean_EnableUnderwaterScattering": self.underwater_scattering_enabled,
            "osgOcean_WaterHeight": self.surface_height,
            "osgOcean_UnderwaterFogColor": self.underwater_fog_color,
            "osgOcean_AboveWaterFogColor": self.above_water_fog_color,
            "osgOcean_UnderwaterFogDensity": -self.underwater_fog_density ** 2 * LOG2E,
            "osgOcean_AboveWaterFogDensity": -self.above_water_fog_density ** 2 * LOG2E,
            "osgOcean_UnderwaterDiffuse": self.underwater_diffuse,
            "osgOcean_UnderwaterAttenuation": self.underwater_attenuation,
        }
        if self.default_shader_enabled:
            self.global_program = self.default_scene_shader

    def _build_god_rays(self) -> None:
        w, h = self.screen_dims
        texture = create_texture_rectangle((w // 2, h // 2), TextureFormat.RGB)
        self.godrays = GodRays(10, self.sun_direction, self.surface_height)
        self.godray_pre_render = render_to_texture_pass(texture)
        self.godray_pre_render.clear_color = GODRAY_CLEAR_COLOR
        self.godray_pre_render.children.append(self.godrays)

        blend = GodRayBlendSurface((-1.0, -1.0, -1.0), (2.0, 2.0), texture.size)
        blend.sun_direction = self.sun_direction
        blend.eccentricity = 0.3
        blend.intensity = 0.1
        self.godray_blend_surface = blend
        self.godray_post_render = godray_final_pass(self.screen_dims)
        self.godray_post_render.children.append(blend)

    def _low_res(self) -> tuple[int, int]:
        return (self.screen_dims[0] // 4, self.screen_dims[1] // 4)

    def _build_dof(self) -> None:
        dims, low = self.screen_dims, self._low_res()
        full = create_texture_rectangle(dims, TextureFormat.RGBA)
        luminance = create_texture_rectangle(dims, TextureFormat.LUMINANCE)
        first = multiple_render_target_pass(full, "COLOR_BUFFER0", luminance, "COLOR_BUFFER1")
        first.uniforms.update(
            {
                "osgOcean_DOF_Near": self.dof_near,
                "osgOcean_DOF_Far": self.dof_far,
                "osgOcean_DOF_Clamp": self.dof_far_clamp,
                "osgOcean_DOF_Focus": self.dof_focus,
            }
        )
        downsized = create_texture_rectangle(low, TextureFormat.RGBA)
        blur_x = create_texture_rectangle(low, TextureFormat.RGBA)
        blur_y = create_texture_rectangle(low, TextureFormat.RGBA)
        combined = create_texture_rectangle(dims, TextureFormat.RGBA)
        self.dof_passes = [
            first,
            downsample_pass(full, None, downsized, False, dims),
            gaussian_pass(downsized, blur_x, True, dims),
            gaussian_pass(blur_x, blur_y, False, dims),
            dof_combiner_pass(full, luminance, blur_y, combined, dims),
            self._dof_final_pass(combined),
        ]

    def _dof_final_pass(self, combined: Texture) -> RenderPass:
        w, h = self.screen_dims
        rp = RenderPass(viewport=(0, 0, w, h))
        rp.set_ortho(0, w, 0.0, h, 1.0, 500.0)
        rp.view = np.identity(4)
        rp.textures[0] = combined
        return rp

    def _build_glare(self) -> None:
        dims, low = self.screen_dims, self._low_res()
        full = create_texture_rectangle(dims, TextureFormat.RGBA)
        luminance = create_texture_rectangle(dims, TextureFormat.LUMINANCE)
        first = multiple_render_target_pass(full, "COLOR_BUFFER0", luminance, "COLOR_BUFFER1")
        first.uniforms["osgOcean_EnableGlare"] = self.glare_enabled
        downsized = create_texture_rectangle(low, TextureFormat.RGBA)
        passes = [
            first,
            downsample_pass(full, luminance, downsized, True, dims, self.glare_threshold),
        ]
        streaks = []
        for direction in _GLARE_DIRECTIONS:
            mid = create_texture_rectangle(low, TextureFormat.RGB)
            out = create_texture_rectangle(low, TextureFormat.RGB)
            passes.append(glare_pass(downsized, mid, 1, direction, dims, self.glare_attenuation))
            passes.append(glare_pass(mid, out, 2, direction, dims, self.glare_attenuation))
            streaks.append(out)
        passes.append(glare_combiner_pass(full, streaks, dims))
        self.glare_passes = passes

    def is_eye_above_water(self, eye: Sequence[float]) -> bool:
        return _vec(eye, 3)[2] >= self.surface_height

    def enable_rtt_effects_for_view(self, view: Hashable, enable: bool) -> None:
        """Switch render-to-texture effects on or off for one view."""
        if enable:
            self.views_with_rtt_disabled.discard(view)
        else:
            self.views_with_rtt_disabled.add(view)

    def view_data(self, view_key: Hashable) -> ViewData:
        """View-dependent state for ``view_key``, created or rebuilt as needed."""
        with self._view_lock:
            data = self._view_data.get(view_key)
            if data is None or data.scene is not self:
                data = ViewData(self)
                self._view_data[view_key] = data
            elif data.dirty:
                with data.lock:
                    data._build()
            return data

    def child_mask(self, mask: int) -> int:
        """Mask a plain scene child gets: drawn normally, reflected and refracted."""
        if mask == 0:
            return 0
        return (
            (mask & ~self.surface_mask & ~self.silt_mask)
            | self.normal_scene_mask
            | self.reflection_scene_mask
            | self.refraction_scene_mask
        )