# Clean, hierarchical, vectorized, and typed robot configuration and helpers
import logging
from dataclasses import dataclass
from typing import Final

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

# -----------------------------
# Typing aliases
# -----------------------------
Vec7f = NDArray[np.float64]
Limits2f = NDArray[np.float64]  # shape (7,2)
DHTable = NDArray[np.float64]  # shape (7,3): a(i-1), d(i), alpha(i-1)

# -----------------------------
# Kinematics constants (meters)
# -----------------------------
Joint_num = 7

d1: float = 0.333
d3: float = 0.316
d5: float = 0.384
a4: float = 0.0825
a5: float = -0.0825
a7: float = 0.088
d_flange: float = 0.107  # link 7 -> flange
d_tcp: float = 0.10  # flange -> tool centre point
tcp_yaw: float = -np.pi / 4  # hand is mounted rotated about the flange z axis

# Shoulder-elbow and elbow-wrist link lengths
L24: float = float(np.hypot(d3, a4))
L46: float = float(np.hypot(d5, a5))

# Fixed interior angles of the elbow geometry
theta342: float = float(np.arctan2(d3, a4))
thetaH46: float = float(np.arctan2(d5, abs(a5)))
theta46H: float = float(np.pi / 2 - thetaH46)

# Modified (Craig) DH rows: a(i-1), d(i), alpha(i-1)
_dh: DHTable = np.array(
    [
        [0.0, d1, 0.0],
        [0.0, 0.0, -np.pi / 2],
        [0.0, d3, np.pi / 2],
        [a4, 0.0, np.pi / 2],
        [a5, d5, -np.pi / 2],
        [0.0, 0.0, np.pi / 2],
        [a7, 0.0, np.pi / 2],
    ],
    dtype=np.float64,
)

# Shoulder (frame 2 origin) in the base frame
shoulder: Final[NDArray[np.float64]] = np.array([0.0, 0.0, d1], dtype=np.float64)

# -----------------------------
# Joint limits
# -----------------------------
_joint_limits_radian: Limits2f = np.array(
    [
        [-2.8973, 2.8973],
        [-1.7628, 1.7628],
        [-2.8973, 2.8973],
        [-3.0718, -0.0698],
        [-2.8973, 2.8973],
        [-0.0175, 3.7525],
        [-2.8973, 2.8973],
    ],
    dtype=np.float64,
)

# Joint speeds (rad/s) from the manufacturer datasheet
_joint_max_speed: Vec7f = np.array(
    [2.175, 2.175, 2.175, 2.175, 2.61, 2.61, 2.61], dtype=np.float64
)

# Preferred posture the redundancy resolver is pulled towards
_neutral_rad: Vec7f = np.array(
    [0.0, -0.785, 0.0, -2.356, 0.0, 1.571, 0.785], dtype=np.float64
)

# Pose the arm starts in and returns to after a batch (bypasses IK)
_home_rad: Vec7f = np.array(
    [1.707, -1.754, 0.003, -2.702, 0.003, 0.951, 2.490], dtype=np.float64
)

# Gripper actuator scale
GRIPPER_CLOSED: Final[float] = 0.0
GRIPPER_OPEN: Final[float] = 255.0


# -----------------------------
# Typed hierarchical API
# -----------------------------
@dataclass(frozen=True)
class Joint:
    """Joint configuration - all values in radians / rad/s."""

    limits_rad: Limits2f  # [7, 2]
    speed_max: Vec7f
    neutral_rad: Vec7f
    home_rad: Vec7f

    @property
    def q_min(self) -> Vec7f:
        return self.limits_rad[:, 0]

    @property
    def q_max(self) -> Vec7f:
        return self.limits_rad[:, 1]


@dataclass(frozen=True)
class Geometry:
    dh: DHTable
    d_flange: float
    d_tcp: float
    tcp_yaw: float
    shoulder: NDArray[np.float64]

    @property
    def reach(self) -> float:
        """Longest shoulder-to-wrist distance the elbow triangle admits."""
        return L24 + L46


for _arr in (_joint_limits_radian, _joint_max_speed, _neutral_rad, _home_rad, _dh):
    _arr.setflags(write=False)

joint: Final[Joint] = Joint(
    limits_rad=_joint_limits_radian,
    speed_max=_joint_max_speed,
    neutral_rad=_neutral_rad,
    home_rad=_home_rad,
)

geometry: Final[Geometry] = Geometry(
    dh=_dh,
    d_flange=d_flange,
    d_tcp=d_tcp,
    tcp_yaw=tcp_yaw,
    shoulder=shoulder,
)


def within_limits(q: NDArray[np.float64]) -> bool:
    """True if every joint of ``q`` lies inside its [min, max] range (inclusive)."""
    q = np.asarray(q, dtype=np.float64)
    return bool(
        np.all(q >= _joint_limits_radian[:, 0]) and np.all(q <= _joint_limits_radian[:, 1])
    )


def log_robot_summary() -> None:
    """Log the kinematic constants at DEBUG. Called once by the CLI at startup."""
    logger.debug("=== Panda Kinematic Model ===")
    logger.debug("L24=%.4f m  L46=%.4f m  reach=%.4f m", L24, L46, geometry.reach)
    logger.debug("Joint min (rad): %s", np.round(joint.q_min, 4))
    logger.debug("Joint max (rad): %s", np.round(joint.q_max, 4))
    logger.debug("Neutral (rad): %s", np.round(joint.neutral_rad, 3))
    logger.debug("=============================")
