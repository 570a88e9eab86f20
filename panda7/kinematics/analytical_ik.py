"""
Closed-form inverse kinematics for the Franka Emika Panda.

Geometric solver after He & Liu, "Analytical Inverse Kinematics for Franka
Emika Panda - a Geometrical Solver for 7-DOF Manipulators with Unconventional
Design". Joint 7 is supplied as the redundancy parameter; the remaining six
joints follow from the shoulder-elbow-wrist triangle and the two wrist
branches.

The solver is a pure function: no logging, no retained state, no exceptions
for unreachable targets.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

import panda7.PANDA_ROBOT as PANDA_ROBOT
from panda7.utils.se3_utils import Pose, clamp_unit, normalize_angle

_Q_MIN = PANDA_ROBOT.joint.q_min
_Q_MAX = PANDA_ROBOT.joint.q_max

_L24 = PANDA_ROBOT.L24
_L46 = PANDA_ROBOT.L46
_LL24 = _L24 * _L24
_LL46 = _L46 * _L46
_THETA342 = PANDA_ROBOT.theta342
_THETA_H46 = PANDA_ROBOT.thetaH46
_THETA_46H = PANDA_ROBOT.theta46H
_D_WRIST = PANDA_ROBOT.geometry.d_flange + PANDA_ROBOT.geometry.d_tcp
_P2 = PANDA_ROBOT.shoulder

_TWO_PI = 2.0 * math.pi
_EPS = 1e-9


def _in_range(angle: float, idx: int) -> float | None:
    """Normalise ``angle`` and return it if joint ``idx`` can take it, else None.

    Joint 6 reaches past pi, so a normalised angle below the minimum gets one
    more try shifted by a full turn.
    """
    a = normalize_angle(angle)
    if a < _Q_MIN[idx]:
        a += _TWO_PI
    if _Q_MIN[idx] <= a <= _Q_MAX[idx]:
        return a
    return None


def _target_frame(target: Pose | ArrayLike) -> tuple[NDArray, NDArray]:
    if isinstance(target, Pose):
        return target.rotation_matrix(), np.asarray(target.position, dtype=np.float64)
    T = np.asarray(target, dtype=np.float64)
    return T[:3, :3], T[:3, 3]


def solve_analytical_ik(target: Pose | ArrayLike, q7: float) -> list[NDArray[np.float64]]:
    """
    All joint configurations reaching ``target`` with joint 7 fixed at ``q7``.

    Parameters
    ----------
    target : Pose | array_like
        Tool-centre-point pose, either a Pose or a 4x4 homogeneous transform
    q7 : float
        Joint 7 angle (rad); values outside its limit yield no solution

    Returns
    -------
    list[NDArray[np.float64]]
        0, 2 or 4 joint vectors, every one inside all joint limits. Order is
        fixed: q6 branch ``pi - psi - phi`` before ``psi - phi``, and within
        each the positive-q2 shoulder branch before its mirror.
    """
    q7 = float(q7)
    if not (_Q_MIN[6] <= q7 <= _Q_MAX[6]):
        return []

    R, p_ee = _target_frame(target)
    z_ee = R[:, 2]

    # Wrist: back off along the approach axis, then across to the frame 6 origin
    p7 = p_ee - _D_WRIST * z_ee
    alpha = math.pi / 4.0 - q7
    x6 = R @ np.array([math.cos(alpha), math.sin(alpha), 0.0])
    x6 /= np.linalg.norm(x6)
    p6 = p7 - PANDA_ROBOT.a7 * x6

    # Elbow (q4) from the shoulder-elbow-wrist triangle
    v26 = p6 - _P2
    ll26 = float(v26 @ v26)
    l26 = math.sqrt(ll26)
    if l26 > _L24 + _L46 or l26 < abs(_L24 - _L46):
        return []

    theta246 = math.acos(clamp_unit((_LL24 + _LL46 - ll26) / (2.0 * _L24 * _L46)))
    q4 = _in_range(theta246 + _THETA342 + _THETA_H46 - _TWO_PI, 3)
    if q4 is None:
        return []

    # Wrist roll (q6): amplitude/phase form of the shoulder vector in frame 6
    y6 = -z_ee
    z6 = np.cross(x6, y6)
    R6 = np.column_stack((x6, y6, z6))

    theta462 = math.acos(clamp_unit((ll26 + _LL46 - _LL24) / (2.0 * l26 * _L46)))
    theta26H = _THETA_46H + theta462
    x_6 = float(x6 @ v26)
    y_6 = float(y6 @ v26)
    amp = math.hypot(x_6, y_6)
    rhs = l26 * math.cos(theta26H)
    if amp < _EPS or abs(rhs) > amp + _EPS:
        return []
    phi = math.atan2(y_6, x_6)
    psi = math.asin(clamp_unit(rhs / amp))

    # Distance from O6 to P, the point on axis 5 in line with the upper arm
    thetaP26 = 1.5 * math.pi - theta462 - theta246 - _THETA342
    thetaP = math.pi - thetaP26 - theta26H
    sin_p = math.sin(thetaP)
    if abs(sin_p) < _EPS:
        return []
    lp6 = l26 * math.sin(thetaP26) / sin_p

    solutions: list[NDArray[np.float64]] = []
    for raw_q6 in (math.pi - psi - phi, psi - phi):
        q6 = _in_range(raw_q6, 5)
        if q6 is None:
            continue
        s6 = math.sin(q6)
        c6 = math.cos(q6)

        z5 = s6 * x6 + c6 * y6
        v2p = v26 - lp6 * z5
        l2p = float(np.linalg.norm(v2p))
        if l2p < _EPS:
            continue

        # Upper-arm frame 3 spans the plane of O2, P and O6
        z3 = v2p / l2p
        y3 = np.cross(v2p, v26)
        n3 = float(np.linalg.norm(y3))
        if n3 < _EPS:
            continue
        y3 /= n3
        x3 = np.cross(y3, z3)

        q2_abs = math.acos(clamp_unit(v2p[2] / l2p))
        shoulder_branches = (
            (math.atan2(v2p[1], v2p[0]), q2_abs),
            (math.atan2(-v2p[1], -v2p[0]), -q2_abs),
        )
        for raw_q1, raw_q2 in shoulder_branches:
            q1 = _in_range(raw_q1, 0)
            if q1 is None:
                continue
            q2 = _in_range(raw_q2, 1)
            if q2 is None:
                continue

            # q3: x3 expressed in frame 2, R2 = Rz(q1) Rx(-pi/2) Rz(q2)
            c1, s1 = math.cos(q1), math.sin(q1)
            c2, s2 = math.cos(q2), math.sin(q2)
            R1 = np.array([[c1, -s1, 0.0], [s1, c1, 0.0], [0.0, 0.0, 1.0]])
            R12 = np.array([[c2, -s2, 0.0], [0.0, 0.0, 1.0], [-s2, -c2, 0.0]])
            x3_2 = (R1 @ R12).T @ x3
            q3 = _in_range(math.atan2(x3_2[2], x3_2[0]), 2)
            if q3 is None:
                continue

            # q5: vector H->O4 seen from frame 5, R5 = R6 * R56^T
            vh4 = _P2 + PANDA_ROBOT.d3 * z3 + PANDA_ROBOT.a4 * x3 - p6 + PANDA_ROBOT.d5 * z5
            h = R6.T @ vh4
            q5 = _in_range(-math.atan2(-h[2], c6 * h[0] - s6 * h[1]), 4)
            if q5 is None:
                continue

            solutions.append(np.array([q1, q2, q3, q4, q5, q6, q7], dtype=np.float64))

    return solutions
