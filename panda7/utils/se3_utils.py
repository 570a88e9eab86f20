"""Pose and orientation utilities built on scipy's Rotation.

Positions are numpy 3-vectors, orientations are unit quaternions in scipy's
(x, y, z, w) order, and transforms are 4x4 homogeneous matrices.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.spatial.transform import Rotation, Slerp

__all__ = [
    "Pose",
    "normalize_angle",
    "clamp_unit",
    "quat_slerp",
    "lerp_position",
    "cylindrical_lerp",
    "quat_angdist",
]

_TWO_PI = 2.0 * math.pi


def normalize_angle(angle: float) -> float:
    """Wrap an angle into (-pi, pi]."""
    a = math.fmod(angle, _TWO_PI)
    if a > math.pi:
        a -= _TWO_PI
    elif a <= -math.pi:
        a += _TWO_PI
    return a


def clamp_unit(x: float) -> float:
    """Clamp an inverse-trig argument into [-1, 1]."""
    return -1.0 if x < -1.0 else (1.0 if x > 1.0 else x)


@dataclass(frozen=True, eq=False)
class Pose:
    """Position plus unit-quaternion orientation of a frame in world coordinates."""

    position: NDArray[np.float64]
    quat: NDArray[np.float64]  # x, y, z, w

    def __post_init__(self) -> None:
        p = np.array(self.position, dtype=np.float64).reshape(3)
        q = np.array(self.quat, dtype=np.float64).reshape(4)
        n = np.linalg.norm(q)
        q = q / n if n > 0 else np.array([0.0, 0.0, 0.0, 1.0])
        p.setflags(write=False)
        q.setflags(write=False)
        object.__setattr__(self, "position", p)
        object.__setattr__(self, "quat", q)

    @classmethod
    def from_matrix(cls, matrix: ArrayLike) -> Pose:
        """Create a Pose from a 4x4 homogeneous transform."""
        m = np.asarray(matrix, dtype=np.float64)
        return cls(m[:3, 3], Rotation.from_matrix(m[:3, :3]).as_quat())

    @classmethod
    def from_euler(
        cls, position: ArrayLike, euler_xyz: ArrayLike, degrees: bool = False
    ) -> Pose:
        """Create a Pose from a position and extrinsic xyz euler angles."""
        quat = Rotation.from_euler("xyz", euler_xyz, degrees=degrees).as_quat()
        return cls(np.asarray(position, dtype=np.float64), quat)

    @classmethod
    def identity(cls, position: ArrayLike = (0.0, 0.0, 0.0)) -> Pose:
        return cls(np.asarray(position, dtype=np.float64), [0.0, 0.0, 0.0, 1.0])

    @property
    def rotation(self) -> Rotation:
        return Rotation.from_quat(self.quat)

    def rotation_matrix(self) -> NDArray[np.float64]:
        return self.rotation.as_matrix()

    def as_matrix(self) -> NDArray[np.float64]:
        """Return the 4x4 homogeneous transform of this pose."""
        T = np.eye(4)
        T[:3, :3] = self.rotation_matrix()
        T[:3, 3] = self.position
        return T

    def __repr__(self) -> str:
        p = np.round(self.position, 4).tolist()
        q = np.round(self.quat, 4).tolist()
        return f"Pose(position={p}, quat={q})"


def quat_slerp(q0: ArrayLike, q1: ArrayLike, s: float) -> NDArray[np.float64]:
    """Spherical interpolation between two quaternions, s in [0, 1]."""
    key_rots = Rotation.from_quat(np.vstack([q0, q1]))
    return Slerp([0.0, 1.0], key_rots)([float(np.clip(s, 0.0, 1.0))])[0].as_quat()


def lerp_position(
    p0: ArrayLike, p1: ArrayLike, s: float
) -> NDArray[np.float64]:
    """Straight-line interpolation between two points."""
    a = np.asarray(p0, dtype=np.float64)
    b = np.asarray(p1, dtype=np.float64)
    return a + (b - a) * s


def cylindrical_lerp(
    p0: ArrayLike, p1: ArrayLike, s: float
) -> NDArray[np.float64]:
    """Interpolate (radius, azimuth, height) about the base z axis.

    The azimuth travels the shorter way round, so long moves arc around the
    robot base instead of cutting through it.
    """
    a = np.asarray(p0, dtype=np.float64)
    b = np.asarray(p1, dtype=np.float64)
    r0 = math.hypot(a[0], a[1])
    r1 = math.hypot(b[0], b[1])
    th0 = math.atan2(a[1], a[0])
    th1 = math.atan2(b[1], b[0])
    d_th = normalize_angle(th1 - th0)
    r = r0 + (r1 - r0) * s
    th = th0 + d_th * s
    z = a[2] + (b[2] - a[2]) * s
    return np.array([r * math.cos(th), r * math.sin(th), z], dtype=np.float64)


def quat_angdist(q0: ArrayLike, q1: ArrayLike) -> float:
    """Angle (rad) of the relative rotation between two orientations."""
    r0 = Rotation.from_quat(q0)
    r1 = Rotation.from_quat(q1)
    return float((r0.inv() * r1).magnitude())
