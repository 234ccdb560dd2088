"""
Frame Converter — Module 4
==========================
Simulation (Z-up, wxyz) → renderer (Y-up, xyzw) conversions and
parent-relative poses.

Quick start::

    from src.modules.m4_frame_converter import FrameConverter

    conv = FrameConverter()
    child  = conv.to_render_pose(xpos[body_id], xquat[body_id])
    parent = conv.to_render_pose(xpos[parent_id], xquat[parent_id])
    local  = conv.relative_pose(child, parent)
"""
from .converter import ROOT_FRAME_CORRECTION, FrameConverter
from .transforms import (
    IDENTITY_QUAT, Pose, compose, quat_conjugate, quat_equivalent,
    quat_from_axis_angle, quat_inverse, quat_multiply, quat_normalize,
    quat_rotate, quat_to_matrix,
)

__all__ = [
    "FrameConverter", "ROOT_FRAME_CORRECTION", "Pose", "IDENTITY_QUAT", "compose",
    "quat_conjugate", "quat_equivalent", "quat_from_axis_angle", "quat_inverse",
    "quat_multiply", "quat_normalize", "quat_rotate", "quat_to_matrix",
]
