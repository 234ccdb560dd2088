"""Tests for Frame Converter - Z-up/wxyz to Y-up/xyzw conversion and relative poses."""

import numpy as np

from src.modules.m1_model_table import MeshData
from src.modules.m4_frame_converter import (
    ROOT_FRAME_CORRECTION, FrameConverter, Pose, compose, quat_equivalent,
    quat_from_axis_angle, quat_multiply, quat_rotate, quat_to_matrix,
)

from conftest import random_quat_wxyz


def _wxyz_to_matrix(q):
    w, x, y, z = q
    return quat_to_matrix([x, y, z, w])


SWAP = np.array([[1, 0, 0], [0, 0, 1], [0, 1, 0]], dtype=np.float64)


class TestQuaternionHelpers:

    def test_axis_angle_rotation(self):
        q = quat_from_axis_angle([0, 0, 1], np.pi / 2)
        assert np.allclose(quat_rotate(q, [1, 0, 0]), [0, 1, 0])

    def test_multiply_applies_right_first(self):
        a = quat_from_axis_angle([0, 0, 1], np.pi / 2)
        b = quat_from_axis_angle([1, 0, 0], np.pi / 2)
        v = [0, 1, 0]
        assert np.allclose(quat_rotate(quat_multiply(a, b), v), quat_rotate(a, quat_rotate(b, v)))

    def test_matrix_matches_rotate(self):
        q = quat_from_axis_angle([1, 2, 3], 0.7)
        v = np.array([0.3, -1.0, 2.0])
        assert np.allclose(quat_to_matrix(q) @ v, quat_rotate(q, v))

    def test_equivalent_ignores_sign(self):
        q = quat_from_axis_angle([0, 1, 0], 0.4)
        assert quat_equivalent(q, -q)
        assert not quat_equivalent(q, quat_from_axis_angle([0, 1, 0], 0.5))

    def test_pose_assign_is_in_place(self):
        pose = Pose.identity()
        position = pose.position
        pose.assign(Pose([1, 2, 3], quat_from_axis_angle([0, 0, 1], 1.0)))
        assert position is pose.position
        assert np.allclose(position, [1, 2, 3])


class TestAxisConversion:

    def setup_method(self):
        self.conv = FrameConverter()

    def test_position_swap(self):
        assert np.array_equal(self.conv.to_render_position([1, 2, 3]), [1, 3, 2])
        assert np.array_equal(self.conv.to_sim_position([1, 3, 2]), [1, 2, 3])

    def test_identity_orientation(self):
        q = self.conv.to_render_orientation([1, 0, 0, 0])
        assert quat_equivalent(q, [0, 0, 0, 1])

    def test_orientation_round_trip_exact(self):
        rng = np.random.default_rng(0)
        for _ in range(50):
            q = random_quat_wxyz(rng)
            back = self.conv.to_sim_orientation(self.conv.to_render_orientation(q))
            assert np.array_equal(back, q)

    def test_orientation_is_reflected_rotation(self):
        rng = np.random.default_rng(1)
        for _ in range(20):
            q = random_quat_wxyz(rng)
            expected = SWAP @ _wxyz_to_matrix(q) @ SWAP
            assert np.allclose(quat_to_matrix(self.conv.to_render_orientation(q)), expected)

    def test_rotated_point_commutes_with_swap(self):
        q_sim = np.array([np.cos(0.3), 0.0, 0.0, np.sin(0.3)])
        v = np.array([1.0, 2.0, 3.0])
        rotated_then_swapped = self.conv.to_render_position(_wxyz_to_matrix(q_sim) @ v)
        swapped_then_rotated = quat_rotate(self.conv.to_render_orientation(q_sim),
                                           self.conv.to_render_position(v))
        assert np.allclose(rotated_then_swapped, swapped_then_rotated)

    def test_mesh_axes_and_winding(self):
        mesh = MeshData(vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]], normals=[[0, 0, 1]] * 3,
                        triangle_indices=[0, 1, 2])
        out = self.conv.to_render_mesh(mesh)
        assert np.allclose(out.vertices, [[0, 0, 0], [1, 0, 0], [0, 0, 1]])
        assert np.allclose(out.normals, [[0, 1, 0]] * 3)
        assert out.triangles.tolist() == [[0, 2, 1]]
        # winding still agrees with the normal
        a, b, c = out.vertices[out.triangles[0]]
        assert np.dot(np.cross(b - a, c - a), out.normals[0]) > 0


class TestRelativePose:

    def setup_method(self):
        self.conv = FrameConverter()
        rng = np.random.default_rng(7)
        self.poses = [
            self.conv.to_render_pose(rng.normal(size=3), random_quat_wxyz(rng)) for _ in range(6)
        ]

    def test_self_relative_is_identity(self):
        for pose in self.poses:
            rel = self.conv.relative_pose(pose, pose)
            assert np.allclose(rel.position, 0.0, atol=1e-12)
            assert quat_equivalent(rel.orientation, [0, 0, 0, 1])

    def test_compose_recovers_child(self):
        for parent, child in zip(self.poses, self.poses[1:]):
            rebuilt = compose(parent, self.conv.relative_pose(child, parent))
            assert np.allclose(rebuilt.position, child.position)
            assert quat_equivalent(rebuilt.orientation, child.orientation)

    def test_chain_composes_to_absolute(self):
        # poses[i] is the parent of poses[i + 1]
        world = self.poses[0]
        for parent, child in zip(self.poses, self.poses[1:]):
            world = compose(world, self.conv.relative_pose(child, parent))
        assert np.allclose(world.position, self.poses[-1].position)
        assert quat_equivalent(world.orientation, self.poses[-1].orientation)

    def test_known_offset(self):
        parent = Pose([1, 0, 0], quat_from_axis_angle([0, 1, 0], np.pi / 2))
        child = Pose([1, 0, -1], parent.orientation)
        rel = self.conv.relative_pose(child, parent)
        assert np.allclose(rel.position, [1, 0, 0])
        assert quat_equivalent(rel.orientation, [0, 0, 0, 1])


class TestRootAlignment:

    def test_correction_is_minus_quarter_turn_about_x(self):
        assert np.allclose(quat_rotate(ROOT_FRAME_CORRECTION, [0, 1, 0]), [0, 0, -1])

    def test_align_root_rotates_pose(self):
        conv = FrameConverter()
        aligned = conv.align_root(Pose([0, 1, 0]))
        assert np.allclose(aligned.position, [0, 0, -1])
        assert quat_equivalent(aligned.orientation, ROOT_FRAME_CORRECTION)

    def test_alignment_can_be_disabled(self):
        pose = Pose([0, 1, 0])
        assert FrameConverter(align_root_frame=False).align_root(pose) is pose
