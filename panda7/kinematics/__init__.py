"""
Kinematics of the 7-DOF Panda arm.

- forward_kinematics / tool_pose: joint angles to tool-centre-point frame
- solve_analytical_ik: closed-form solutions for a fixed joint 7 angle
- RedundancyResolver: picks one solution by scanning joint 7
"""

from panda7.kinematics.analytical_ik import solve_analytical_ik
from panda7.kinematics.forward import (
    as_joint_vector,
    forward_kinematics,
    joint_origins,
    tool_pose,
)
from panda7.kinematics.redundancy import CandidateSolution, RedundancyResolver

__all__ = [
    "solve_analytical_ik",
    "forward_kinematics",
    "joint_origins",
    "tool_pose",
    "as_joint_vector",
    "RedundancyResolver",
    "CandidateSolution",
]
