"""Keyboard control of an ocean scene and the camera-following ocean cylinder."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from oceansim.ocean_scene import OceanScene

__all__ = ["SceneEventHandler", "CylinderTracker"]

logger = logging.getLogger(__name__)

_TOGGLES: dict[str, tuple[str, str]] = {
    "r": ("reflections_enabled", "Reflections"),
    "R": ("refractions_enabled", "Refractions"),
    "o": ("underwater_dof_enabled", "Depth of field"),
    "g": ("glare_enabled", "Glare"),
    "G": ("god_rays_enabled", "God rays"),
    "t": ("silt_enabled", "Silt"),
    "T": ("underwater_scattering_enabled", "Underwater scattering"),
    "H": ("heightmap_enabled", "Height lookup for shoreline foam and sine shape"),
}

_USAGE: tuple[tuple[str, str], ...] = (
    ("r", "Toggle reflections (above water)"),
    ("R", "Toggle refractions (underwater)"),
    ("o", "Toggle Depth of Field (DOF) (underwater)"),
    ("g", "Toggle glare (above water)"),
    ("G", "Toggle God rays (underwater)"),
    ("t", "Toggle silt (underwater)"),
    ("T", "Toggle scattering (underwater)"),
    ("H", "Toggle Height lookup for shoreline foam and sine shape (above water)"),
    ("+", "Raise ocean surface"),
    ("-", "Lower ocean surface"),
)


class SceneEventHandler:
    """Toggles scene effects and moves the surface in response to key releases."""

    def __init__(self, scene: OceanScene) -> None:
        self.scene = scene
        self._actions: dict[str, Callable[[], None]] = {
            key: self._toggler(attr, label) for key, (attr, label) in _TOGGLES.items()
        }
        self._actions["+"] = lambda: self._move_surface(1.0)
        self._actions["-"] = lambda: self._move_surface(-1.0)

    def _toggler(self, attr: str, label: str) -> Callable[[], None]:
        def toggle() -> None:
            value = not getattr(self.scene, attr)
            setattr(self.scene, attr, value)
            if attr == "heightmap_enabled" and self.scene.technique is not None:
                # The surface shaders depend on the heightmap switch.
                self.scene.technique.dirty()
            logger.info("%s %s", label, "enabled" if value else "disabled")

        return toggle

    def _move_surface(self, delta: float) -> None:
        self.scene.surface_height = self.scene.surface_height + delta
        logger.info("Ocean surface is now at z = %s", self.scene.surface_height)

    def handle(self, key: str, handled: bool = False) -> bool:
        """React to a released ``key``; returns True if the key was consumed."""
        if handled:
            return False
        action = self._actions.get(key)
        if action is None:
            return False
        action()
        return True

    def usage(self) -> list[tuple[str, str]]:
        """Key bindings with their descriptions, in display order."""
        return list(_USAGE)


class CylinderTracker:
    """Places the fog-coloured ocean cylinder under the eye each frame."""

    def __init__(self, scene: OceanScene) -> None:
        self.scene = scene

    def cylinder_offset(self, eye: Sequence[float]) -> Optional[tuple[float, float, float]]:
        """Translation for the cylinder, or None when it should not follow the eye.

        A technique confined to an area (``endless_ocean_enabled`` false) hides
        the cylinder, since the water then usually has walls of its own.
        """
        technique = self.scene.technique
        if technique is None:
            raise RuntimeError("the scene has no ocean technique")
        x, y, z = (float(c) for c in eye)

        if not getattr(technique, "endless_ocean_enabled", True):
            self.scene.cylinder_mask = 0
            return None

        # Shift down when above water so the cylinder does not peek through
        # the waves, and up when below so no cracks show at its rim.
        mult = -1.0 if self.scene.is_eye_above_water((x, y, z)) else 1.0
        offset = (
            -self.scene.cylinder_height
            + self.scene.surface_height
            + mult * technique.get_maximum_height()
        )
        return (x, y, offset)