"""
panda7 Python Package

Analytical inverse kinematics and pick-and-place sequencing for the 7-DOF
Franka Panda arm.

Key components:
- solve_analytical_ik: closed-form IK for a fixed joint 7 angle
- RedundancyResolver: chooses one solution by scanning joint 7
- Sequencer: tick-driven pick-and-place state machine
- ManualIkController: arm follows a user-placed target frame
- KinematicSimulation: headless stand-in for the physics engine
"""

from . import PANDA_ROBOT
from .kinematics import RedundancyResolver, forward_kinematics, solve_analytical_ik, tool_pose
from .manual_ik import ManualIkController
from .motion import PickTarget, Sequencer
from .sim import KinematicSimulation, PhysicsState

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "PANDA_ROBOT",
    "solve_analytical_ik",
    "forward_kinematics",
    "tool_pose",
    "RedundancyResolver",
    "Sequencer",
    "PickTarget",
    "ManualIkController",
    "KinematicSimulation",
    "PhysicsState",
]
