"""Forward kinematics of the Panda arm (modified DH convention)."""

import numpy as np
from numpy.typing import ArrayLike, NDArray

import panda7.PANDA_ROBOT as PANDA_ROBOT
from panda7.utils.errors import JointVectorError
from panda7.utils.se3_numba import mdh_chain, se3_mdh
from panda7.utils.se3_utils import Pose

# Link 7 -> tool centre point (flange offset, hand yaw, finger offset)
_T_7_TCP = np.empty((4, 4), dtype=np.float64)
se3_mdh(
    0.0,
    0.0,
    PANDA_ROBOT.geometry.tcp_yaw,
    PANDA_ROBOT.geometry.d_flange + PANDA_ROBOT.geometry.d_tcp,
    _T_7_TCP,
)
_T_7_TCP.setflags(write=False)


def as_joint_vector(q: ArrayLike) -> NDArray[np.float64]:
    """Validate and copy ``q`` into a contiguous float64 7-vector."""
    arr = np.ascontiguousarray(q, dtype=np.float64).reshape(-1)
    if arr.shape[0] != PANDA_ROBOT.Joint_num:
        raise JointVectorError(
            f"expected {PANDA_ROBOT.Joint_num} joint values, got {arr.shape[0]}"
        )
    return arr.copy()


def forward_kinematics(q: ArrayLike) -> NDArray[np.float64]:
    """Tool-centre-point transform (4x4) in the base frame for joint angles ``q``."""
    q_arr = as_joint_vector(q)
    origins = np.empty((PANDA_ROBOT.Joint_num + 1, 3), dtype=np.float64)
    out = np.empty((4, 4), dtype=np.float64)
    mdh_chain(q_arr, PANDA_ROBOT.geometry.dh, _T_7_TCP, origins, out)
    return out


def joint_origins(q: ArrayLike) -> NDArray[np.float64]:
    """Base plus link 1..7 frame origins, shape (8, 3)."""
    q_arr = as_joint_vector(q)
    origins = np.empty((PANDA_ROBOT.Joint_num + 1, 3), dtype=np.float64)
    out = np.empty((4, 4), dtype=np.float64)
    mdh_chain(q_arr, PANDA_ROBOT.geometry.dh, _T_7_TCP, origins, out)
    return origins


def tool_pose(q: ArrayLike) -> Pose:
    """Tool-centre-point pose for joint angles ``q``."""
    return Pose.from_matrix(forward_kinematics(q))
