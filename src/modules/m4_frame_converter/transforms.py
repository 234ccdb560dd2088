"""Quaternion and pose helpers. Quaternions are (x, y, z, w) numpy arrays."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

IDENTITY_QUAT = np.array([0.0, 0.0, 0.0, 1.0])


def _norm(v: np.ndarray) -> np.ndarray:
    n = np.linalg.norm(v)
    return v / (n + 1e-12)


def quat_normalize(q) -> np.ndarray:
    q = np.asarray(q, dtype=np.float64)
    n = np.linalg.norm(q)
    if n == 0.0:
        return IDENTITY_QUAT.copy()
    return q / n


def quat_conjugate(q) -> np.ndarray:
    x, y, z, w = np.asarray(q, dtype=np.float64)
    return np.array([-x, -y, -z, w])


def quat_inverse(q) -> np.ndarray:
    q = np.asarray(q, dtype=np.float64)
    return quat_conjugate(q) / np.dot(q, q)


def quat_multiply(a, b) -> np.ndarray:
    """Hamilton product ``a * b`` (apply b first, then a)."""
    ax, ay, az, aw = np.asarray(a, dtype=np.float64)
    bx, by, bz, bw = np.asarray(b, dtype=np.float64)
    return np.array([
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    ])


def quat_rotate(q, v) -> np.ndarray:
    """Rotate vector *v* by quaternion *q*."""
    q = quat_normalize(q)
    u, w = q[:3], q[3]
    v = np.asarray(v, dtype=np.float64)
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def quat_from_axis_angle(axis, angle: float) -> np.ndarray:
    axis = _norm(np.asarray(axis, dtype=np.float64))
    s = np.sin(angle / 2.0)
    return np.array([axis[0] * s, axis[1] * s, axis[2] * s, np.cos(angle / 2.0)])


def quat_to_matrix(q) -> np.ndarray:
    """3x3 rotation matrix of a (normalised) quaternion."""
    x, y, z, w = quat_normalize(q)
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w),     2 * (x * z + y * w)],
        [2 * (x * y + z * w),     1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w),     2 * (y * z + x * w),     1 - 2 * (x * x + y * y)],
    ])


def quat_equivalent(a, b, atol: float = 1e-9) -> bool:
    """True when *a* and *b* encode the same rotation (q and -q are equal)."""
    a, b = quat_normalize(a), quat_normalize(b)
    return bool(np.allclose(a, b, atol=atol) or np.allclose(a, -b, atol=atol))


@dataclass
class Pose:
    """Position plus orientation. Mutable so scene nodes can be updated in place."""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orientation: np.ndarray = field(default_factory=lambda: IDENTITY_QUAT.copy())

    def __post_init__(self):
        self.position = np.array(self.position, dtype=np.float64).reshape(3)
        self.orientation = np.array(self.orientation, dtype=np.float64).reshape(4)

    @classmethod
    def identity(cls) -> "Pose":
        return cls()

    def copy(self) -> "Pose":
        return Pose(self.position.copy(), self.orientation.copy())

    def assign(self, other: "Pose") -> None:
        """Overwrite this pose's arrays with *other*'s values."""
        self.position[:] = other.position
        self.orientation[:] = other.orientation

    def as_tuple(self) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
        return tuple(self.position.tolist()), tuple(self.orientation.tolist())


def compose(parent: Pose, local: Pose) -> Pose:
    """World pose of a child given its parent's world pose and its local pose."""
    return Pose(
        parent.position + quat_rotate(parent.orientation, local.position),
        quat_multiply(parent.orientation, local.orientation),
    )
