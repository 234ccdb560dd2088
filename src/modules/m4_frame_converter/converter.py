"""
#WHERE
    Used by m5_pose_sync (per-tick relative transforms and initial scene
    transforms) and m3_geometry (mesh axis conversion).

#WHAT
    Coordinate-space conversion between the simulation (Z-up, quaternion
    stored w, x, y, z) and the renderer (Y-up, quaternion stored x, y, z, w),
    plus the parent-relative pose a hierarchical scene graph needs.

#INPUT
    Simulation-space vectors/quaternions (numpy or sequences), Pose pairs.

#OUTPUT
    Render-space vectors, quaternions, Poses and MeshData.

Axis swap
---------
Positions map (x, y, z) → (x, z, y).  Swapping one pair of axes is a
reflection, so a rotation R becomes P·R·P: the axis is swapped like a
position and the angle changes sign.  Negating the scalar part gives
exactly that quaternion, which is why orientation maps

    sim (w, x, y, z)  →  render (x, z, y, -w)

The inverse map is its own mirror image and round-trips exactly.
"""

from __future__ import annotations

import logging

import numpy as np

from src.modules.m1_model_table import MeshData
from src.shared.constants import ROOT_CORRECTION_ANGLE, ROOT_CORRECTION_AXIS

from .transforms import (
    Pose, quat_from_axis_angle, quat_inverse, quat_multiply, quat_rotate,
)

log = logging.getLogger(__name__)

ROOT_FRAME_CORRECTION = quat_from_axis_angle(ROOT_CORRECTION_AXIS, ROOT_CORRECTION_ANGLE)


class FrameConverter:
    """Simulation → renderer conversions and relative pose composition."""

    def __init__(self, align_root_frame: bool = True,
                 root_correction: np.ndarray = ROOT_FRAME_CORRECTION):
        self.align_root_frame = align_root_frame
        self.root_correction = np.array(root_correction, dtype=np.float64)

    # ── vectors and quaternions ───────────────────────────────────

    @staticmethod
    def to_render_position(v) -> np.ndarray:
        x, y, z = np.asarray(v, dtype=np.float64).reshape(3)
        return np.array([x, z, y])

    @staticmethod
    def to_sim_position(v) -> np.ndarray:
        x, y, z = np.asarray(v, dtype=np.float64).reshape(3)
        return np.array([x, z, y])

    @staticmethod
    def to_render_orientation(q_sim) -> np.ndarray:
        w, x, y, z = np.asarray(q_sim, dtype=np.float64).reshape(4)
        return np.array([x, z, y, -w])

    @staticmethod
    def to_sim_orientation(q_render) -> np.ndarray:
        x, y, z, w = np.asarray(q_render, dtype=np.float64).reshape(4)
        return np.array([-w, x, z, y])

    def to_render_pose(self, position, orientation) -> Pose:
        return Pose(self.to_render_position(position), self.to_render_orientation(orientation))

    # ── poses ─────────────────────────────────────────────────────

    @staticmethod
    def relative_pose(child_abs: Pose, parent_abs: Pose) -> Pose:
        """Child pose expressed in the parent's local frame."""
        parent_inv = quat_inverse(parent_abs.orientation)
        return Pose(
            quat_rotate(parent_inv, child_abs.position - parent_abs.position),
            quat_multiply(parent_inv, child_abs.orientation),
        )

    def align_root(self, pose: Pose) -> Pose:
        """Apply the one-time world frame alignment given to root bodies."""
        if not self.align_root_frame:
            return pose
        return Pose(
            quat_rotate(self.root_correction, pose.position),
            quat_multiply(self.root_correction, pose.orientation),
        )

    # ── meshes ────────────────────────────────────────────────────

    @staticmethod
    def to_render_mesh(mesh: MeshData) -> MeshData:
        """Swap mesh axes; the reflection also flips triangle winding."""
        swap = [0, 2, 1]
        return MeshData(
            vertices=mesh.vertices[:, swap],
            normals=mesh.normals[:, swap],
            triangle_indices=mesh.triangles[:, swap],
            name=mesh.name,
        )
