"""Render-to-texture passes used by the ocean scene's screen effects."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from oceansim.ocean_technique import CameraState
from oceansim.screen_quad import ScreenAlignedQuad

__all__ = [
    "TextureFormat",
    "Texture",
    "RenderPass",
    "create_texture_2d",
    "create_texture_rectangle",
    "create_screen_quad",
    "render_to_texture_pass",
    "multiple_render_target_pass",
    "godray_final_pass",
    "downsample_pass",
    "gaussian_pass",
    "dof_combiner_pass",
    "glare_pass",
    "glare_combiner_pass",
]

INHERIT_VIEWPOINT = "ABSOLUTE_RF_INHERIT_VIEWPOINT"
FRAME_BUFFER_OBJECT = "FRAME_BUFFER_OBJECT"
PRE_RENDER = "PRE_RENDER"

_BUFFERS = frozenset({"COLOR_BUFFER", "COLOR_BUFFER0", "COLOR_BUFFER1", "DEPTH_BUFFER"})
_COLOR_AND_DEPTH = frozenset({"color", "depth"})


class TextureFormat(enum.Enum):
    """Internal pixel format of a render target texture."""

    RGB = "RGB"
    RGBA = "RGBA"
    LUMINANCE = "LUMINANCE"
    DEPTH_COMPONENT = "DEPTH_COMPONENT"


@dataclass(eq=False)
class Texture:
    """A texture that a pass renders into or samples from."""

    width: int
    height: int
    texture_format: TextureFormat
    target: str = "TEXTURE_2D"
    min_filter: str = "LINEAR"
    mag_filter: str = "LINEAR"
    wrap_s: str = "CLAMP_TO_EDGE"
    wrap_t: str = "CLAMP_TO_EDGE"
    dynamic: bool = True

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


@dataclass(eq=False)
class RenderPass:
    """A camera rendering its children, usually into textures."""

    viewport: Optional[tuple[int, int, int, int]] = None
    clear_mask: frozenset = _COLOR_AND_DEPTH
    clear_color: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)
    clear_depth: float = 1.0
    reference_frame: str = INHERIT_VIEWPOINT
    render_target: Optional[str] = None
    render_order: Optional[tuple[str, int]] = None
    attachments: dict[str, Texture] = field(default_factory=dict)
    projection: Optional[np.ndarray] = None
    view: Optional[np.ndarray] = None
    program: Optional[str] = None
    textures: dict[int, Texture] = field(default_factory=dict)
    uniforms: dict[str, object] = field(default_factory=dict)
    modes: dict[str, bool] = field(default_factory=dict)
    children: list[object] = field(default_factory=list)
    cull_mask: int = 0xFFFFFFFF
    compute_near_far: bool = True

    def set_ortho(
        self,
        left: float,
        right: float,
        bottom: float,
        top: float,
        z_near: float,
        z_far: float,
    ) -> None:
        """Use an orthographic projection."""
        self.projection = CameraState.orthographic(
            left, right, bottom, top, z_near, z_far
        ).projection


def _dims(size: Sequence[int]) -> tuple[int, int]:
    w, h = (int(v) for v in size)
    if w <= 0 or h <= 0:
        raise ValueError(f"size must be positive, got {(w, h)}")
    return w, h


def _low_res(screen_dims: Sequence[int]) -> tuple[int, int]:
    w, h = _dims(screen_dims)
    low = (w // 4, h // 4)
    if low[0] <= 0 or low[1] <= 0:
        raise ValueError(f"screen {(w, h)} is too small to downsample")
    return low


def _identity() -> np.ndarray:
    return np.identity(4)


def create_texture_2d(size: Sequence[int], texture_format: TextureFormat) -> Texture:
    """2D texture; depth textures are sampled with nearest filtering."""
    w, h = _dims(size)
    texture_format = TextureFormat(texture_format)
    filt = "NEAREST" if texture_format is TextureFormat.DEPTH_COMPONENT else "LINEAR"
    return Texture(w, h, texture_format, "TEXTURE_2D", filt, filt)


def create_texture_rectangle(size: Sequence[int], texture_format: TextureFormat) -> Texture:
    """Rectangle texture addressed in pixels, always linearly filtered."""
    w, h = _dims(size)
    return Texture(w, h, TextureFormat(texture_format), "TEXTURE_RECTANGLE")


def create_screen_quad(dims: Sequence[float], tex_size: Sequence[float]) -> ScreenAlignedQuad:
    """Quad from the origin spanning ``dims`` with texture coords up to ``tex_size``."""
    return ScreenAlignedQuad((0.0, 0.0, 0.0), dims, tex_size)


def render_to_texture_pass(texture: Texture) -> RenderPass:
    """Pre-render pass drawing into the colour buffer ``texture``."""
    return RenderPass(
        viewport=(0, 0, texture.width, texture.height),
        render_target=FRAME_BUFFER_OBJECT,
        render_order=(PRE_RENDER, 1),
        attachments={"COLOR_BUFFER": texture},
    )


def multiple_render_target_pass(
    texture0: Texture, buffer0: str, texture1: Texture, buffer1: str
) -> RenderPass:
    """Pre-render pass drawing into two buffers at once."""
    for buffer in (buffer0, buffer1):
        if buffer not in _BUFFERS:
            raise ValueError(f"unknown buffer component {buffer!r}")
    if buffer0 == buffer1:
        raise ValueError("the two render targets must use different buffers")
    return RenderPass(
        viewport=(0, 0, texture0.width, texture0.height),
        render_target=FRAME_BUFFER_OBJECT,
        render_order=(PRE_RENDER, 1),
        attachments={buffer0: texture0, buffer1: texture1},
    )


def godray_final_pass(screen_dims: Sequence[int]) -> RenderPass:
    """Screen pass into which the god ray blend surface is drawn."""
    w, h = _dims(screen_dims)
    rp = RenderPass(viewport=(0, 0, w, h), clear_mask=frozenset({"depth"}))
    rp.set_ortho(-1.0, 1.0, -1.0, 1.0, 1.0, 500.0)
    rp.view = _identity()
    return rp


def downsample_pass(
    color_buffer: Texture,
    aux_buffer: Optional[Texture],
    output_texture: Texture,
    is_glare_effect: bool,
    screen_dims: Sequence[int],
    glare_threshold: float = 0.9,
) -> RenderPass:
    """Shrink the full screen image to a quarter of its size."""
    low = _low_res(screen_dims)
    rp = render_to_texture_pass(output_texture)
    if is_glare_effect:
        if aux_buffer is None:
            raise ValueError("the glare downsample needs a luminance buffer")
        rp.program = "downsample_glare"
        rp.textures[1] = aux_buffer
        rp.uniforms["osgOcean_GlareThreshold"] = float(glare_threshold)
        rp.uniforms["osgOcean_LuminanceTexture"] = 1
    else:
        rp.program = "downsample"
    rp.textures[0] = color_buffer
    rp.uniforms["osgOcean_ColorTexture"] = 0
    rp.set_ortho(0, low[0], 0, low[1], 1, 10)
    rp.view = _identity()
    rp.children.append(create_screen_quad(low, _dims(screen_dims)))
    return rp


def gaussian_pass(
    input_texture: Texture,
    output_texture: Texture,
    is_x_axis: bool,
    screen_dims: Sequence[int],
) -> RenderPass:
    """One direction of a separable gaussian blur at quarter resolution."""
    low = _low_res(screen_dims)
    rp = render_to_texture_pass(output_texture)
    rp.program = "gaussian1" if is_x_axis else "gaussian2"
    rp.textures[0] = input_texture
    rp.uniforms["osgOcean_GaussianTexture"] = 0
    rp.set_ortho(0, low[0], 0, low[1], 1, 10)
    rp.children.append(create_screen_quad(low, low))
    return rp


def dof_combiner_pass(
    fullscreen_texture: Texture,
    full_depth_texture: Texture,
    blur_texture: Texture,
    output_texture: Texture,
    screen_dims: Sequence[int],
) -> RenderPass:
    """Mix the sharp and blurred images by the depth-of-field luminance."""
    w, h = _dims(screen_dims)
    rp = render_to_texture_pass(output_texture)
    rp.program = "dof_combiner"
    rp.textures.update({0: fullscreen_texture, 1: full_depth_texture, 2: blur_texture})
    rp.uniforms.update(
        {
            "osgOcean_FullColourMap": 0,
            "osgOcean_FullDepthMap": 1,
            "osgOcean_BlurMap": 2,
            "osgOcean_ScreenRes": (float(w), float(h)),
            "osgOcean_ScreenResInv": (1.0 / w, 1.0 / h),
            "osgOcean_LowRes": (w * 0.25, h * 0.25),
        }
    )
    rp.set_ortho(0, w, 0, h, 1, 10)
    rp.children.append(create_screen_quad((w, h), (1, 1)))
    return rp


def glare_pass(
    streak_input: Texture,
    streak_output: Texture,
    pass_number: int,
    direction: Sequence[float],
    screen_dims: Sequence[int],
    attenuation: float = 0.75,
) -> RenderPass:
    """One streak filter step spreading bright pixels along ``direction``."""
    low = _low_res(screen_dims)
    dx, dy = (float(c) for c in direction)
    rp = render_to_texture_pass(streak_output)
    rp.clear_color = (0.0, 0.0, 0.0, 0.0)
    rp.set_ortho(0, low[0], 0.0, low[1], 1.0, 500.0)
    rp.program = "streak_shader"
    rp.modes["lighting"] = False
    rp.textures[0] = streak_input
    rp.uniforms.update(
        {
            "osgOcean_Buffer": 0,
            "osgOcean_Pass": float(pass_number),
            "osgOcean_Direction": (dx, dy),
            "osgOcean_Attenuation": float(attenuation),
        }
    )
    rp.children.append(create_screen_quad(low, low))
    return rp


def glare_combiner_pass(
    fullscreen_texture: Texture,
    glare_textures: Sequence[Texture],
    screen_dims: Sequence[int],
) -> RenderPass:
    """Final screen pass adding the four streak buffers onto the scene."""
    streaks = list(glare_textures)
    if len(streaks) != 4:
        raise ValueError(f"expected 4 glare textures, got {len(streaks)}")
    w, h = _dims(screen_dims)
    rp = RenderPass(viewport=(0, 0, w, h))
    rp.set_ortho(0, w, 0.0, h, 1.0, 500.0)
    rp.view = _identity()
    rp.program = "glare_composite"
    rp.textures[0] = fullscreen_texture
    rp.uniforms["osgOcean_ColorBuffer"] = 0
    for unit, texture in enumerate(streaks, start=1):
        rp.textures[unit] = texture
        rp.uniforms[f"osgOcean_StreakBuffer{unit}"] = unit
    rp.children.append(create_screen_quad((w, h), (w, h)))
    return rp